"""Mattermost chat formatter.

Mattermost renders markdown, so links use ``[text](url)`` and free text is
passed through unchanged apart from control characters.
"""

from .base import FormatterRegistry
from .chat import ChatMessageFormatter
from .markup import clean_control_characters, single_line


@FormatterRegistry.register
class MattermostFormatter(ChatMessageFormatter):
    """Format webhook events as Mattermost incoming-webhook messages."""

    @classmethod
    def get_target_name(cls) -> str:
        return "mattermost"

    def link(self, url: str, text: str) -> str:
        # Brackets in the label would end the link early
        label = single_line(clean_control_characters(text)).replace("[", "(").replace("]", ")")
        return f"[{label}]({url})"

    def escape(self, text: str) -> str:
        return single_line(clean_control_characters(text))

    def format_text(self, text: str) -> str:
        return clean_control_characters(text)
