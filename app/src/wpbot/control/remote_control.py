import asyncio
from dataclasses import dataclass
from typing import Optional

from wpbot.cloud.remote_commands import RemoteCommands
from wpbot.core.base import BotStatus, RemoteCommand
from wpbot.infra.logging import logger, log_event, log_warning
from wpbot.telegram.notifier import TelegramNotifier


@dataclass
class PublishState:
    is_paused: bool = False
    queue_length: int = 0
    completed_count: int = 0
    failed_count: int = 0
    current_item: Optional[str] = None

    def snapshot(self) -> BotStatus:
        return BotStatus(
            is_paused=self.is_paused,
            queue_length=self.queue_length,
            completed_count=self.completed_count,
            failed_count=self.failed_count,
            current_item=self.current_item,
        )


class RemoteControl:
    """Applies pause/resume/status commands queued by the chat bot."""

    def __init__(self, commands: RemoteCommands, notifier: TelegramNotifier, state: Optional[PublishState] = None):
        self.commands = commands
        self.notifier = notifier
        self.state = state or PublishState()

    async def _apply(self, cmd: RemoteCommand) -> bool:
        if cmd.command == "pause":
            self.state.is_paused = True
            await self.notifier.notify_paused()
        elif cmd.command == "resume":
            self.state.is_paused = False
            await self.notifier.notify_resumed()
        elif cmd.command == "status":
            await self.notifier.notify_status(self.state.snapshot())
        else:
            log_warning("remote_command_unknown", command_id=cmd.id, command=cmd.command)
            return False
        log_event("remote_command", command_id=cmd.id, command=cmd.command, paused=self.state.is_paused)
        return True

    async def poll_once(self, user_id: str) -> int:
        """Handle every pending command in order; returns how many were applied."""
        # supabase calls are blocking
        pending = await asyncio.to_thread(self.commands.list_unprocessed, user_id)
        handled = 0
        for cmd in pending:
            if await self._apply(cmd):
                handled += 1
            try:
                await asyncio.to_thread(self.commands.mark_processed, cmd.id)
            except Exception as e:
                log_warning("remote_command_ack_failed", command_id=cmd.id, error=str(e)[:200])
        await asyncio.to_thread(self.commands.publish_status, user_id, self.state.snapshot())
        return handled

    async def run(self, user_id: str, interval_sec: float = 10.0) -> None:
        log_event("remote_control_start", user_id=user_id, interval_s=interval_sec)
        while True:
            try:
                await self.poll_once(user_id)
            except Exception as e:
                logger.warning(f"[remote] poll error: {e}")
            await asyncio.sleep(interval_sec)
