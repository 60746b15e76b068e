import logging
from typing import Any, Dict, Optional

import requests

from webhooks.models.notification import NotificationMessage

logger = logging.getLogger(__name__)

# Default timeout for incoming-webhook requests (seconds)
DEFAULT_TIMEOUT = 30


class SlackClient:
    """Client for posting messages to a Slack-compatible incoming webhook.

    Mattermost accepts the same request body, so both chat services use it.
    """

    def __init__(
        self,
        webhook_url: str,
        channel: Optional[str] = None,
        username: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """Initialize the client with the incoming webhook URL"""
        self.webhook_url = webhook_url
        self.channel = channel
        self.username = username
        self.timeout = timeout

    def send_message(self, message: Dict[str, Any]) -> bool:
        """Post a raw message body to the webhook URL"""
        if not self.webhook_url:
            raise ValueError("Webhook URL is unset")
        try:
            response = requests.post(
                self.webhook_url, json=message, timeout=self.timeout
            )
            response.raise_for_status()
            return True
        except requests.exceptions.Timeout:
            logger.error(
                "Chat webhook request timed out",
                extra={"timeout": self.timeout},
            )
            raise RuntimeError("Chat webhook request timed out") from None
        except requests.exceptions.RequestException as e:
            logger.error(
                "Failed to send message to chat webhook",
                extra={"error": str(e)},
                exc_info=True,
            )
            raise RuntimeError("Failed to send notification to chat webhook") from e

    def send_notification(self, notification: NotificationMessage) -> bool:
        """Send a formatted notification"""
        return self.send_message(
            notification.to_webhook_payload(
                channel=self.channel, username=self.username
            )
        )
