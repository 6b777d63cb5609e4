"""Configuration management for Cadence."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CADENCE_HOME = Path(os.environ.get("CADENCE_HOME", Path.home() / "cadence"))
CONFIG_FILE = CADENCE_HOME / "config" / "cadence.conf"

MESSENGERS = ("log", "whatsapp", "telegram")


@dataclass
class Config:
    """Cadence configuration."""

    supabase_url: str = ""
    supabase_key: str = ""
    messenger: str = "log"
    whatsapp_token: str = ""
    whatsapp_phone_number_id: str = ""
    telegram_bot_token: str = ""
    timezone: str = "UTC"
    # Scheduler settings
    scheduler_enabled: bool = True
    scheduler_interval_minutes: int = 1440
    lookahead_days: int = 7
    default_duration_minutes: int = 30


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default
    if parsed <= 0:
        logger.warning(f"{key.upper()} must be positive, got {parsed}, using {default}")
        return default
    return parsed


def load_config(path: Path | None = None) -> Config:
    """Load configuration from cadence.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "supabase_url":
                config.supabase_url = value
            case "supabase_key":
                config.supabase_key = value
            case "messenger":
                if value.lower() in MESSENGERS:
                    config.messenger = value.lower()
                else:
                    logger.warning(f"Unknown MESSENGER {value!r}, using {config.messenger}")
            case "whatsapp_token":
                config.whatsapp_token = value
            case "whatsapp_phone_number_id":
                config.whatsapp_phone_number_id = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "timezone":
                config.timezone = value
            case "scheduler_enabled":
                config.scheduler_enabled = value.lower() in ("1", "true", "yes", "on")
            case "scheduler_interval_minutes":
                config.scheduler_interval_minutes = _parse_int(key, value, config.scheduler_interval_minutes)
            case "lookahead_days":
                config.lookahead_days = _parse_int(key, value, config.lookahead_days)
            case "default_duration_minutes":
                config.default_duration_minutes = _parse_int(key, value, config.default_duration_minutes)

    return config
