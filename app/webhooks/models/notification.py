"""Chat notification models.

This module contains the immutable message produced by a formatter for one
webhook event and its conversion to an incoming-webhook payload.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Attachment:
    """A body block rendered under the pretext by the chat client.

    Attributes:
        text: Attachment body.
        color: Sidebar color (hex code).
    """

    text: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "color": self.color}


@dataclass(frozen=True, slots=True)
class NotificationMessage:
    """A chat notification for a single event.

    Attributes:
        pretext: Single-line summary shown above the attachments.
        attachments: Ordered attachment blocks, possibly empty.
    """

    pretext: str
    attachments: tuple[Attachment, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert the message to a plain dictionary.

        Returns:
            Dictionary with ``pretext`` and ``attachments`` keys.
        """
        return {
            "pretext": self.pretext,
            "attachments": [attachment.to_dict() for attachment in self.attachments],
        }

    def to_webhook_payload(
        self, channel: str | None = None, username: str | None = None
    ) -> dict[str, Any]:
        """Convert the message to an incoming-webhook request body.

        Args:
            channel: Optional channel override.
            username: Optional sender name override.

        Returns:
            Dictionary containing text, attachments and overrides.
        """
        payload: dict[str, Any] = {
            "text": self.pretext,
            "attachments": [attachment.to_dict() for attachment in self.attachments],
        }
        if channel:
            payload["channel"] = channel
        if username:
            payload["username"] = username
        return payload
