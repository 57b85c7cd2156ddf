from dotenv import load_dotenv
import os
import dacite
import yaml
from wpbot.core.base import Config

load_dotenv()

# load config.yaml
SCRIPT_DIR = os.path.dirname(os.path.realpath(__file__))

def load_config(path: str = os.path.join(SCRIPT_DIR, "config.yaml")) -> Config:
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return dacite.from_dict(Config, raw)

CONFIG: Config = load_config()

ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", CONFIG.admin_email)
MIN_PASSWORD_LENGTH = CONFIG.min_password_length

# Secrets. Telegram ones are optional: notifications are skipped when unset.
TELEGRAM_BOT_TOKEN = os.environ.get("TELEGRAM_BOT_TOKEN", "")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID", "")
TELEGRAM_API_BASE = os.environ.get("TELEGRAM_API_BASE", "https://api.telegram.org")
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")

# Outbound call budget shared by every Telegram call site
RATE_LIMIT_PER_MINUTE = int(os.environ.get("RATE_LIMIT_PER_MINUTE", "10"))
RATE_LIMIT_PER_HOUR = int(os.environ.get("RATE_LIMIT_PER_HOUR", "100"))

REMOTE_POLL_INTERVAL_SEC = float(os.environ.get("REMOTE_POLL_INTERVAL_SEC", "10"))


class ConfigError(Exception):
    pass

def require_env(name: str) -> str:
    """Return a required environment value, failing fast at startup."""
    value = os.environ.get(name, "").strip()
    if not value:
        raise ConfigError(f"missing required environment variable {name}")
    return value
