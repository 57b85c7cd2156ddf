import aiohttp
import time
from typing import Any, Callable, Optional

from wpbot.core.base import BotStatus
from wpbot.infra.logging import logger, log_event, log_warning
from wpbot.rate_limit import RateLimiter
from wpbot.telegram import messages


class TelegramError(Exception):
    pass


class TelegramNotifier:
    """Sends chat notifications through the Telegram Bot API.

    Every outbound call goes through the shared RateLimiter:
      - send(): drop policy, a denied call is skipped and reported as False
      - send_when_allowed(): deferral policy, sleeps until a slot frees up
    Failures never raise; they are logged and reported as False.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        rate_limiter: RateLimiter,
        parse_mode: str = "HTML",
        timeout_sec: float = 10.0,
        time_format: str = messages.DEFAULT_TIME_FORMAT,
        api_base: str = "https://api.telegram.org",
        session_factory: Optional[Callable[[], Any]] = None,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.rate_limiter = rate_limiter
        self.parse_mode = parse_mode
        self.timeout_sec = timeout_sec
        self.time_format = time_format
        self.api_base = api_base.rstrip("/")
        self._session_factory = session_factory or self._default_session

    def _default_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_sec))

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    @property
    def send_message_url(self) -> str:
        return f"{self.api_base}/bot{self.bot_token}/sendMessage"

    async def send(self, message: str) -> bool:
        if not self.is_configured:
            log_warning("telegram_skip", reason="not_configured")
            return False
        if not self.rate_limiter.can_make_call():
            log_warning("telegram_rate_limited", wait_ms=self.rate_limiter.get_wait_time())
            return False
        return await self._post(message, record=True)

    async def send_when_allowed(self, message: str, max_wait_ms: Optional[int] = None) -> bool:
        if not self.is_configured:
            log_warning("telegram_skip", reason="not_configured")
            return False
        # wait_for_slot books the call itself
        if not await self.rate_limiter.wait_for_slot(max_wait_ms=max_wait_ms):
            log_warning("telegram_rate_limited", wait_ms=self.rate_limiter.get_wait_time(), max_wait_ms=max_wait_ms)
            return False
        return await self._post(message, record=False)

    async def _post(self, message: str, record: bool) -> bool:
        payload = {
            "chat_id": self.chat_id,
            "text": message,
            "parse_mode": self.parse_mode,
        }
        start = time.perf_counter()
        try:
            async with self._session_factory() as session:
                async with session.post(self.send_message_url, json=payload) as resp:
                    # got a response: the call happened, whatever the status
                    if record:
                        self.rate_limiter.record_call()
                    status = resp.status
                    if not 200 <= status < 300:
                        body = await resp.text()
                        raise TelegramError(f"HTTP {status}: {body[:200]}")
            elapsed = (time.perf_counter() - start) * 1000
            log_event("telegram_sent", chars=len(message), elapsed_ms=f"{elapsed:.1f}")
            return True
        except Exception as e:
            logger.exception(f"[telegram] send failed error={e}")
            return False

    # --- canned notifications -------------------------------------------

    async def notify_publish_success(self, title: str, site_url: str) -> bool:
        return await self.send(messages.format_publish_success(title, site_url, time_format=self.time_format))

    async def notify_publish_failed(self, title: str, error: str) -> bool:
        return await self.send(messages.format_publish_failed(title, error, time_format=self.time_format))

    async def notify_batch_start(self, count: int) -> bool:
        return await self.send(messages.format_batch_start(count, time_format=self.time_format))

    async def notify_batch_complete(self, success: int, failed: int) -> bool:
        return await self.send(messages.format_batch_complete(success, failed, time_format=self.time_format))

    async def notify_paused(self) -> bool:
        return await self.send(messages.format_paused())

    async def notify_resumed(self) -> bool:
        return await self.send(messages.format_resumed())

    async def notify_status(self, status: BotStatus) -> bool:
        return await self.send(messages.format_status(status, time_format=self.time_format))


__all__ = ["TelegramNotifier", "TelegramError"]
