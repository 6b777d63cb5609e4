"""Messaging interface."""

from typing import Protocol


class Messenger(Protocol):
    """Interface for proactive customer notifications."""

    def send_proactive_message(self, destination: str, text: str, contact_id: str) -> None:
        """Send a message. Transport failures are logged, not raised."""
        ...
