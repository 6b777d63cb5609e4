"""WhatsApp Cloud API adapter - HTTP client for customer notifications."""

import logging

import requests

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com/v19.0"


class WhatsAppMessenger:
    """
    WhatsApp Cloud API messenger.

    Implements Messenger protocol. Delivery errors are logged and swallowed.
    """

    def __init__(self, token: str, phone_number_id: str, timeout: int = 15):
        self.token = token
        self.phone_number_id = phone_number_id
        self.timeout = timeout
        self._session = requests.Session()

    def send_proactive_message(self, destination: str, text: str, contact_id: str) -> None:
        """Send a text message to a phone number."""
        if not destination:
            logger.warning(f"No phone number for contact {contact_id}, message not sent")
            return

        try:
            resp = self._session.post(
                f"{GRAPH_API_BASE}/{self.phone_number_id}/messages",
                headers={"Authorization": f"Bearer {self.token}"},
                json={
                    "messaging_product": "whatsapp",
                    "to": destination.lstrip("+"),
                    "type": "text",
                    "text": {"body": text},
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
            logger.info(f"Sent WhatsApp message to contact {contact_id}")
        except requests.RequestException as e:
            logger.error(f"Failed to send WhatsApp message to contact {contact_id}: {e}")
