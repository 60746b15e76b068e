"""Base formatter interface and registry for notification targets.

This module defines the BaseFormatter abstract class and FormatterRegistry
for managing chat formatters by target channel type.
"""

from abc import ABC, abstractmethod

from webhooks.domain_models import Event
from webhooks.models.notification import NotificationMessage


class BaseFormatter(ABC):
    """Abstract base class for notification formatters.

    Formatters convert typed webhook events into a NotificationMessage
    whose markup suits the target chat platform.
    """

    @classmethod
    @abstractmethod
    def get_target_name(cls) -> str:
        """Return the target platform identifier.

        Returns:
            Target identifier string (e.g., "slack", "mattermost").
        """
        pass

    @abstractmethod
    def format(self, event: Event) -> NotificationMessage:
        """Format an event for the target platform.

        Args:
            event: Decoded webhook event.

        Returns:
            NotificationMessage for the event.

        Raises:
            ValidationError: If the event is malformed.
            UnsupportedKindError: If the event kind is not handled.
        """
        pass


class FormatterRegistry:
    """Registry for notification formatters.

    Provides registration and lookup of formatters by target name.
    Formatters self-register on import via the @register decorator.

    Example:
        >>> formatter = FormatterRegistry.get("slack")
        >>> message = formatter.format(event)
    """

    _formatters: dict[str, type[BaseFormatter]] = {}

    @classmethod
    def register(cls, formatter_class: type[BaseFormatter]) -> type[BaseFormatter]:
        """Register a formatter class.

        Can be used as a class decorator:

            @FormatterRegistry.register
            class SlackFormatter(ChatMessageFormatter):
                ...

        Args:
            formatter_class: Formatter class to register.

        Returns:
            The formatter class (for decorator chaining).
        """
        target_name = formatter_class.get_target_name()
        cls._formatters[target_name] = formatter_class
        return formatter_class

    @classmethod
    def get(cls, target: str) -> BaseFormatter:
        """Get a formatter instance for the target platform.

        Args:
            target: Target platform identifier.

        Returns:
            Formatter instance.

        Raises:
            KeyError: If no formatter registered for target.
        """
        if target not in cls._formatters:
            available = ", ".join(cls._formatters.keys()) or "(none)"
            raise KeyError(
                f"No formatter registered for target '{target}'. "
                f"Available: {available}"
            )
        return cls._formatters[target]()

    @classmethod
    def get_available_targets(cls) -> list[str]:
        """Get list of available target platforms."""
        return list(cls._formatters.keys())

    @classmethod
    def is_registered(cls, target: str) -> bool:
        return target in cls._formatters
