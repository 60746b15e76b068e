"""Base class for webhook source implementations.

A provider authenticates an inbound webhook request and decodes its body into
a typed event from ``webhooks.domain_models``.
"""

from abc import ABC, abstractmethod
from typing import Any

from django.http import HttpRequest

from ..domain_models import Event


class WebhookProvider(ABC):
    """Abstract base class for webhook sources.

    Attributes:
        webhook_secret: Shared secret used to authenticate deliveries.
    """

    def __init__(self, webhook_secret: str) -> None:
        """Initialize the provider with webhook credentials.

        Args:
            webhook_secret: Secret token for webhook validation.
        """
        self.webhook_secret = webhook_secret

    @abstractmethod
    def validate_webhook(self, request: HttpRequest) -> bool:
        """Validate the authenticity of a webhook request.

        Args:
            request: The incoming HTTP request containing the webhook.

        Returns:
            True if the webhook is valid, False otherwise.
        """

    @abstractmethod
    def parse_payload(self, data: Any, kind: str | None = None) -> Event:
        """Decode an already-parsed payload mapping into a typed event.

        Args:
            data: The payload mapping.
            kind: Event kind; read from the payload when omitted.

        Raises:
            ValidationError: If a required field is absent or malformed.
            UnsupportedKindError: If the event kind is not recognized.
        """

    @abstractmethod
    def parse_webhook(self, request: HttpRequest) -> Event:
        """Decode the body of a webhook request into a typed event.

        Raises:
            ValidationError: If the body is not a valid payload.
            UnsupportedKindError: If the event kind is not recognized.
        """
