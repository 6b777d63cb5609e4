"""Adapters - I/O implementations of ports."""

from .supabase_store import SupabaseStore
from .memory_store import InMemoryStore
from .booking_conflicts import BookingConflictChecker
from .whatsapp import WhatsAppMessenger
from .telegram_bot import TelegramMessenger
from .log_messenger import LogMessenger
from .clock import SystemClock

__all__ = [
    "SupabaseStore",
    "InMemoryStore",
    "BookingConflictChecker",
    "WhatsAppMessenger",
    "TelegramMessenger",
    "LogMessenger",
    "SystemClock",
]
