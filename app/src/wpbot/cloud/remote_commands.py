from typing import Any, Dict, List

from wpbot.cloud.client import utc_now_iso
from wpbot.core.base import BotStatus, RemoteCommand
from wpbot.infra.logging import logger, log_warning


def _to_command(row: Dict[str, Any]) -> RemoteCommand:
    return RemoteCommand(
        id=str(row["id"]),
        command=str(row.get("command", "")),
        created_at=str(row.get("created_at", "")),
        processed=bool(row.get("processed", False)),
    )


class RemoteCommands:
    """Commands queued by the chat bot, and the status it reads back."""

    def __init__(self, client: Any, commands_table: str = "remote_commands", status_table: str = "bot_status"):
        self.client = client
        self.commands_table = commands_table
        self.status_table = status_table

    def list_unprocessed(self, user_id: str) -> List[RemoteCommand]:
        """Oldest first."""
        try:
            resp = (
                self.client.table(self.commands_table)
                .select("*")
                .eq("user_id", user_id)
                .eq("processed", False)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as e:
            log_warning("remote_commands_fetch_failed", user_id=user_id, error=str(e)[:200])
            return []
        return [_to_command(row) for row in resp.data or []]

    def mark_processed(self, command_id: str) -> None:
        self.client.table(self.commands_table).update({"processed": True}).eq("id", command_id).execute()

    def publish_status(self, user_id: str, status: BotStatus) -> None:
        row = {"user_id": user_id, **status.render(), "updated_at": utc_now_iso()}
        try:
            self.client.table(self.status_table).upsert(row, on_conflict="user_id").execute()
        except Exception as e:
            logger.exception(f"[remote] status update failed user_id={user_id} error={e}")
