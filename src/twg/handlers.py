"""Downstream handling of verified activities: protocol + default reply."""

from __future__ import annotations

import logging
from typing import Any, Protocol

__all__ = ["ActivityHandlerProtocol", "AcknowledgementHandler", "message_reply"]

logger = logging.getLogger(__name__)

DEFAULT_REPLY_TEXT = "Message received and verified."


def message_reply(text: str) -> dict[str, Any]:
    """Minimal Teams reply activity."""
    return {"type": "message", "text": text}


class ActivityHandlerProtocol(Protocol):
    """Receives an activity only after its signature has been verified."""

    async def handle(self, activity: dict[str, Any]) -> dict[str, Any]:
        """Process the activity and return the reply activity."""
        ...


class AcknowledgementHandler:
    """Replies with a fixed acknowledgement; forwards nothing."""

    def __init__(self, reply_text: str = DEFAULT_REPLY_TEXT) -> None:
        self._reply_text = reply_text

    async def handle(self, activity: dict[str, Any]) -> dict[str, Any]:
        text = activity.get("text")
        logger.info(
            "Activity received: type=%s text_length=%d",
            activity.get("type", "(none)"),
            len(text) if isinstance(text, str) else 0,
        )
        return message_reply(self._reply_text)
