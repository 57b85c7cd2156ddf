#!/usr/bin/env python3
import os
import sys
import logging
import asyncio

sys.path.append(os.path.dirname(os.path.realpath(__file__)))

from wpbot.constants import (
    CONFIG,
    TELEGRAM_BOT_TOKEN,
    TELEGRAM_CHAT_ID,
    TELEGRAM_API_BASE,
    SUPABASE_URL,
    SUPABASE_ANON_KEY,
    RATE_LIMIT_PER_MINUTE,
    RATE_LIMIT_PER_HOUR,
    REMOTE_POLL_INTERVAL_SEC,
    require_env,
)
from wpbot.infra.logging import logger, log_event
from wpbot.rate_limit import build_rate_limiter
from wpbot.telegram.notifier import TelegramNotifier
from wpbot.cloud.client import build_supabase_client
from wpbot.cloud.auth import AuthSession
from wpbot.cloud.settings_sync import SettingsSync
from wpbot.cloud.remote_commands import RemoteCommands
from wpbot.control.remote_control import RemoteControl


logging.basicConfig(
    format="[%(asctime)s] [%(filename)s:%(lineno)d] %(message)s", level=logging.INFO
)


async def heartbeat_task(rate_limiter):
    while True:
        try:
            log_event("heartbeat", recent_calls=rate_limiter.recent_call_count, wait_ms=rate_limiter.get_wait_time())
        except Exception as e:
            logger.warning(f"[health] heartbeat error: {e}")
        await asyncio.sleep(60)


async def run():
    # one budget for every Telegram call site in this process
    rate_limiter = build_rate_limiter(RATE_LIMIT_PER_MINUTE, RATE_LIMIT_PER_HOUR)
    notifier = TelegramNotifier(
        bot_token=TELEGRAM_BOT_TOKEN,
        chat_id=TELEGRAM_CHAT_ID,
        rate_limiter=rate_limiter,
        parse_mode=CONFIG.telegram.parse_mode,
        timeout_sec=CONFIG.telegram.timeout_sec,
        time_format=CONFIG.telegram.time_format,
        api_base=TELEGRAM_API_BASE,
    )
    log_event("startup", name=CONFIG.name, telegram=notifier.is_configured, per_minute=RATE_LIMIT_PER_MINUTE, per_hour=RATE_LIMIT_PER_HOUR)

    client = build_supabase_client(SUPABASE_URL, SUPABASE_ANON_KEY)
    auth = AuthSession(client)
    result = auth.authenticate(require_env("ADMIN_PASSWORD"))
    if not result.ok:
        log_event("login_failed", error=result.error_message)
        return 1
    user = auth.current_user()
    if user is None:
        log_event("login_failed", error="no session")
        return 1

    settings = SettingsSync(client, CONFIG.tables.user_settings).load(str(user.id))
    log_event("settings", user_id=user.id, found=settings is not None)

    control = RemoteControl(
        RemoteCommands(client, CONFIG.tables.remote_commands, CONFIG.tables.bot_status),
        notifier,
    )
    heartbeat = asyncio.create_task(heartbeat_task(rate_limiter))
    try:
        await control.run(str(user.id), interval_sec=REMOTE_POLL_INTERVAL_SEC)
    finally:
        heartbeat.cancel()
        auth.end_session()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        log_event("shutdown", reason="keyboard_interrupt")
