"""Tests for notification adapters."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests
from telegram.error import TelegramError

from cadence.adapters import LogMessenger, TelegramMessenger, WhatsAppMessenger


class TestWhatsAppMessenger:
    @pytest.fixture
    def messenger(self):
        messenger = WhatsAppMessenger(token="tok", phone_number_id="12345")
        messenger._session = MagicMock()
        return messenger

    def test_posts_text_message(self, messenger):
        messenger.send_proactive_message("+15550001111", "hello", "c1")

        url = messenger._session.post.call_args.args[0]
        kwargs = messenger._session.post.call_args.kwargs
        assert url.endswith("/12345/messages")
        assert kwargs["headers"] == {"Authorization": "Bearer tok"}
        assert kwargs["json"] == {
            "messaging_product": "whatsapp",
            "to": "15550001111",
            "type": "text",
            "text": {"body": "hello"},
        }

    def test_skips_empty_destination(self, messenger):
        messenger.send_proactive_message("", "hello", "c1")
        messenger._session.post.assert_not_called()

    def test_swallows_http_errors(self, messenger):
        messenger._session.post.return_value.raise_for_status.side_effect = requests.HTTPError("401")
        messenger.send_proactive_message("+15550001111", "hello", "c1")

    def test_swallows_transport_errors(self, messenger):
        messenger._session.post.side_effect = requests.ConnectionError("down")
        messenger.send_proactive_message("+15550001111", "hello", "c1")


class TestTelegramMessenger:
    @patch("cadence.adapters.telegram_bot.Bot")
    def test_sends_to_chat(self, mock_bot_cls):
        bot = MagicMock()
        bot.__aenter__.return_value = bot
        bot.__aexit__.return_value = False
        bot.send_message = AsyncMock()
        mock_bot_cls.return_value = bot

        TelegramMessenger("tok").send_proactive_message("42", "hello", "c1")

        mock_bot_cls.assert_called_once_with("tok")
        bot.send_message.assert_awaited_once_with(chat_id="42", text="hello")

    @patch("cadence.adapters.telegram_bot.Bot")
    def test_swallows_telegram_errors(self, mock_bot_cls):
        bot = MagicMock()
        bot.__aenter__.return_value = bot
        bot.__aexit__.return_value = False
        bot.send_message = AsyncMock(side_effect=TelegramError("chat not found"))
        mock_bot_cls.return_value = bot

        TelegramMessenger("tok").send_proactive_message("42", "hello", "c1")

    @patch("cadence.adapters.telegram_bot.Bot")
    def test_skips_empty_destination(self, mock_bot_cls):
        TelegramMessenger("tok").send_proactive_message("", "hello", "c1")
        mock_bot_cls.assert_not_called()


class TestLogMessenger:
    def test_logs_messages(self, caplog):
        caplog.set_level(logging.INFO, logger="cadence.adapters.log_messenger")
        messenger = LogMessenger()
        messenger.send_proactive_message("+1555", "hello", "c1")
        assert "[message to +1555] hello" in caplog.text

    def test_falls_back_to_contact_id(self, caplog):
        caplog.set_level(logging.INFO, logger="cadence.adapters.log_messenger")
        LogMessenger().send_proactive_message("", "hello", "c1")
        assert "[message to c1] hello" in caplog.text

    def test_keeps_no_history(self):
        messenger = LogMessenger()
        for _ in range(3):
            messenger.send_proactive_message("+1555", "hello", "c1")
        assert not hasattr(messenger, "sent")
