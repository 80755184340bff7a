"""Static configuration for tgbridge.

All settings come from environment variables, optionally loaded from a .env
file next to the project, so secrets never live in the repository.
"""

import os

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

load_dotenv(os.path.join(PROJECT_ROOT, ".env"))


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Telegram credentials; client.build_client fails fast when they are missing.
TELEGRAM_API_ID = os.getenv("TELEGRAM_API_ID")
TELEGRAM_API_HASH = os.getenv("TELEGRAM_API_HASH")
TELEGRAM_PHONE_NUMBER = os.getenv("TELEGRAM_PHONE_NUMBER")
TELEGRAM_PASSWORD = os.getenv("TELEGRAM_PASSWORD")
# Telethon stores the session in <SESSION_NAME>.session.
SESSION_NAME = os.getenv("SESSION_NAME", "tgbridge")
# Dialogs fetched at startup so entities are cached before events arrive.
DIALOG_SYNC_LIMIT = int(os.getenv("DIALOG_SYNC_LIMIT", "100"))

# Control-plane server.
SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "3000"))
API_SECRET = os.getenv("API_SECRET", "changeme_please")

# Webhook delivery. WEBHOOK_TEST only receives retried deliveries.
WEBHOOK_PROD = os.getenv("WEBHOOK_PROD", "https://n8n.example.com/webhook/your-webhook-id")
WEBHOOK_TEST = os.getenv("WEBHOOK_TEST", "https://n8n.example.com/webhook-test/your-webhook-id")
WEBHOOK_TIMEOUT = float(os.getenv("WEBHOOK_TIMEOUT", "30"))

# Quiet period before an album is considered complete.
ALBUM_DEBOUNCE_MS = int(os.getenv("ALBUM_DEBOUNCE_MS", "2000"))

# Logging configuration. Values of the listed environment variables are
# masked in every log line when redaction is enabled.
LOGGING = {
    "enabled": True,
    "level": os.getenv("LOG_LEVEL", "INFO"),
    "console": _env_bool("LOG_CONSOLE", True),
    "file": {
        "enabled": bool(os.getenv("LOG_FILE")),
        "path": os.getenv("LOG_FILE", "logs/tgbridge.log"),
        "max_bytes": int(os.getenv("LOG_FILE_MAX_BYTES", str(5 * 1024 * 1024))),
        "backup_count": int(os.getenv("LOG_FILE_BACKUP_COUNT", "5")),
    },
    "redact": {
        "enabled": _env_bool("LOG_REDACT", True),
        "patterns": ["API_SECRET", "TELEGRAM_API_HASH", "TELEGRAM_PASSWORD", "TELEGRAM_PHONE_NUMBER"],
    },
}
