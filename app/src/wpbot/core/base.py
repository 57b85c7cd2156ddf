from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TelegramConfig:
    parse_mode: str = "HTML"
    timeout_sec: float = 10.0
    # strftime pattern used to stamp notifications
    time_format: str = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class TablesConfig:
    user_settings: str = "user_settings"
    remote_commands: str = "remote_commands"
    bot_status: str = "bot_status"


@dataclass(frozen=True)
class Config:
    name: str
    admin_email: str
    min_password_length: int = 6
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    tables: TablesConfig = field(default_factory=TablesConfig)


@dataclass(frozen=True)
class BotStatus:
    """Snapshot of the publishing queue, reported to the chat bot."""
    is_paused: bool
    queue_length: int
    completed_count: int
    failed_count: int
    current_item: Optional[str] = None

    def render(self):
        # column names of the bot_status table the chat bot reads
        return {
            "isPaused": self.is_paused,
            "queueLength": self.queue_length,
            "completedCount": self.completed_count,
            "failedCount": self.failed_count,
            "currentItem": self.current_item,
        }


@dataclass(frozen=True)
class RemoteCommand:
    id: str
    command: str  # "pause" | "resume" | "status"
    created_at: str
    processed: bool = False


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    error_message: Optional[str] = None
