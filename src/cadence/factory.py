"""Wiring - build adapters, the processing service and the scheduler from config."""

from .adapters import (
    BookingConflictChecker,
    LogMessenger,
    SupabaseStore,
    SystemClock,
    TelegramMessenger,
    WhatsAppMessenger,
)
from .config import Config, load_config
from .ports import Clock, Messenger, RowStore
from .processing import RecurringProcessingService
from .scheduler import RecurringScheduler

# Contact column holding each transport's address
ADDRESS_FIELDS = {
    "whatsapp": "phone_number",
    "telegram": "telegram_chat_id",
    "log": "phone_number",
}


def build_messenger(config: Config) -> Messenger:
    """Pick the notification transport named in config."""
    match config.messenger:
        case "whatsapp":
            if not config.whatsapp_token or not config.whatsapp_phone_number_id:
                raise ValueError("WHATSAPP_TOKEN and WHATSAPP_PHONE_NUMBER_ID must be set for MESSENGER=whatsapp")
            return WhatsAppMessenger(config.whatsapp_token, config.whatsapp_phone_number_id)
        case "telegram":
            if not config.telegram_bot_token:
                raise ValueError("TELEGRAM_BOT_TOKEN must be set for MESSENGER=telegram")
            return TelegramMessenger(config.telegram_bot_token)
        case _:
            return LogMessenger()


def build_service(
    config: Config | None = None,
    store: RowStore | None = None,
    messenger: Messenger | None = None,
    clock: Clock | None = None,
) -> RecurringProcessingService:
    """Create the processing service, defaulting each collaborator from config."""
    config = config or load_config()
    store = store or SupabaseStore(config)
    return RecurringProcessingService(
        store=store,
        messenger=messenger or build_messenger(config),
        conflicts=BookingConflictChecker(store),
        clock=clock or SystemClock(),
        lookahead_days=config.lookahead_days,
        default_duration_minutes=config.default_duration_minutes,
        timezone=config.timezone,
        address_field=ADDRESS_FIELDS.get(config.messenger, "phone_number"),
    )


def build_scheduler(config: Config | None = None, **collaborators) -> RecurringScheduler:
    """Create a scheduler around a freshly built processing service."""
    return RecurringScheduler(build_service(config, **collaborators))
