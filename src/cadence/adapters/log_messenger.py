"""Messenger that only logs - for local runs without a transport."""

import logging

logger = logging.getLogger(__name__)


class LogMessenger:
    """Implements Messenger protocol by logging each message."""

    def send_proactive_message(self, destination: str, text: str, contact_id: str) -> None:
        logger.info(f"[message to {destination or contact_id}] {text}")
