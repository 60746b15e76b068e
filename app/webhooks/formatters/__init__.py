"""Notification formatters package.

This package contains formatters that convert typed webhook events into
chat messages for each target channel type (Slack, Mattermost).
"""

from .base import BaseFormatter, FormatterRegistry
from .chat import KIND_COLORS, ChatMessageFormatter
from .mattermost import MattermostFormatter
from .slack import SlackFormatter


def format_event(event, target: str = "slack"):
    """Format an event with the formatter registered for ``target``."""
    return FormatterRegistry.get(target).format(event)


__all__ = [
    "BaseFormatter",
    "ChatMessageFormatter",
    "FormatterRegistry",
    "KIND_COLORS",
    "MattermostFormatter",
    "SlackFormatter",
    "format_event",
]
