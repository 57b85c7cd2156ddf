from datetime import datetime, timezone

from supabase import Client, create_client

from wpbot.constants import ConfigError


def build_supabase_client(url: str, anon_key: str) -> Client:
    if not url or not anon_key:
        raise ConfigError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
    return create_client(url, anon_key)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
