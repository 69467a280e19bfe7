"""Tests for the default activity handler and body parsing."""

from __future__ import annotations

import pytest

from twg.api.routes.webhook_teams import parse_activity
from twg.handlers import AcknowledgementHandler, message_reply


class TestAcknowledgementHandler:
    @pytest.mark.anyio()
    async def test_default_reply(self) -> None:
        reply = await AcknowledgementHandler().handle({"type": "message", "text": "hi"})
        assert reply == {"type": "message", "text": "Message received and verified."}

    @pytest.mark.anyio()
    async def test_custom_reply_text(self) -> None:
        reply = await AcknowledgementHandler("pong").handle({})
        assert reply == message_reply("pong")


class TestParseActivity:
    def test_json_object(self) -> None:
        assert parse_activity(b'{"type":"message","text":"hi"}') == {"type": "message", "text": "hi"}

    def test_plain_text_wrapped(self) -> None:
        assert parse_activity(b"hello") == {"text": "hello"}

    def test_json_non_object_wrapped(self) -> None:
        assert parse_activity(b"[1,2]") == {"text": "[1,2]"}

    def test_invalid_utf8_replaced(self) -> None:
        assert parse_activity(b"\xffhi") == {"text": "\ufffdhi"}
