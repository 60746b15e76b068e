"""Slack chat formatter.

Renders links as ``<url|text>`` and converts links in free text to the same
syntax, escaping everything Slack would otherwise interpret.
"""

from .base import FormatterRegistry
from .chat import ChatMessageFormatter
from .markup import (
    clean_control_characters,
    escape_slack_link_text,
    escape_slack_mrkdwn,
    markdown_to_slack_mrkdwn,
    single_line,
)


@FormatterRegistry.register
class SlackFormatter(ChatMessageFormatter):
    """Format webhook events as Slack incoming-webhook messages."""

    @classmethod
    def get_target_name(cls) -> str:
        return "slack"

    def link(self, url: str, text: str) -> str:
        return f"<{url}|{escape_slack_link_text(single_line(text))}>"

    def escape(self, text: str) -> str:
        return escape_slack_mrkdwn(single_line(clean_control_characters(text)))

    def format_text(self, text: str) -> str:
        return markdown_to_slack_mrkdwn(text)
