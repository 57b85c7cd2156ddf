from typing import Any, Dict, Optional

from wpbot.cloud.client import utc_now_iso
from wpbot.infra.logging import logger, log_event

# PostgREST: .single() matched no rows
NO_ROWS_CODE = "PGRST116"


class SettingsSync:
    """Per-user settings blob stored in one Supabase row."""

    def __init__(self, client: Any, table: str = "user_settings"):
        self.client = client
        self.table = table

    def load(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            resp = (
                self.client.table(self.table)
                .select("settings")
                .eq("user_id", user_id)
                .single()
                .execute()
            )
        except Exception as e:
            if getattr(e, "code", None) == NO_ROWS_CODE:
                return None
            logger.exception(f"[settings] load failed user_id={user_id} error={e}")
            return None
        data = resp.data or {}
        log_event("settings_loaded", user_id=user_id)
        return data.get("settings")

    def save(self, user_id: str, settings: Dict[str, Any]) -> bool:
        row = {
            "user_id": user_id,
            "settings": settings,
            "updated_at": utc_now_iso(),
        }
        try:
            self.client.table(self.table).upsert(row, on_conflict="user_id").execute()
        except Exception as e:
            logger.exception(f"[settings] save failed user_id={user_id} error={e}")
            return False
        log_event("settings_saved", user_id=user_id)
        return True
