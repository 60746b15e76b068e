"""Text helpers for chat markup.

This module provides the escaping and link conversion used by the chat
formatters, including markdown/HTML link to Slack mrkdwn conversion.
"""

import re
from html.parser import HTMLParser
from urllib.parse import urlparse

# Markdown links [text](url) and HTML anchors <a href="url">text</a>
_LINK_PATTERN = re.compile(
    r"\[(?P<md_text>[^\]\n]+)\]\((?P<md_url>[^)\s]+)\)"
    r"|<a\s[^>]*?href=[\"'](?P<html_url>[^\"']+)[\"'][^>]*>(?P<html_text>.*?)</a>",
    re.IGNORECASE | re.DOTALL,
)

# Characters that would break out of Slack's <url|text> syntax
_UNSAFE_URL_CHARS = set("<>| \n\t")

# Line breaks inside single-line text
_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


class _AnchorParser(HTMLParser):
    """Collect the href and text content of one HTML anchor.

    Nested tags are dropped; entity and character references in the text
    are decoded.
    """

    ENTITY_MAP = {"amp": "&", "lt": "<", "gt": ">", "quot": '"', "apos": "'", "nbsp": " "}

    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self.href: str | None = None
        self.parts: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "a" and self.href is None:
            for name, value in attrs:
                if name == "href" and value:
                    self.href = value
                    break

    def handle_data(self, data: str) -> None:
        self.parts.append(data.replace("\xa0", " "))

    def handle_entityref(self, name: str) -> None:
        self.handle_data(self.ENTITY_MAP.get(name, f"&{name};"))

    def handle_charref(self, name: str) -> None:
        try:
            if name.startswith(("x", "X")):
                char = chr(int(name[1:], 16))
            else:
                char = chr(int(name))
        except (ValueError, OverflowError):
            return
        self.handle_data(char)

    @property
    def text(self) -> str:
        return "".join(self.parts)


def clean_control_characters(text: str) -> str:
    """Remove null bytes and control characters from text.

    Args:
        text: The text to clean.

    Returns:
        The cleaned text.
    """
    # Keep newline and tab
    return "".join(
        char
        for char in text
        if char in ("\n", "\t") or (ord(char) >= 32 and char != "\x7f")
    )


def sanitize_url(url: str | None) -> str | None:
    """Sanitize a URL taken from untrusted text.

    Only allows http and https schemes.

    Args:
        url: The URL to sanitize.

    Returns:
        The sanitized URL, or None if the URL is invalid/dangerous.
    """
    if not url:
        return None

    url = clean_control_characters(url.strip())
    if any(char in _UNSAFE_URL_CHARS for char in url):
        return None

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        return None
    return url


def single_line(text: str) -> str:
    """Collapse line breaks (and the whitespace around them) into one space."""
    return _LINE_BREAKS.sub(" ", text)


def escape_slack_mrkdwn(text: str) -> str:
    """Escape special Slack mrkdwn characters in plain text.

    Slack requires escaping <, >, and & characters.
    """
    # & first since it's used in the other escapes
    text = text.replace("&", "&amp;")
    text = text.replace("<", "&lt;")
    text = text.replace(">", "&gt;")
    return text


def escape_slack_link_text(text: str) -> str:
    """Escape text for use inside Slack link display text.

    Inside Slack links <url|text>, the pipe character must be avoided.
    """
    text = escape_slack_mrkdwn(clean_control_characters(text))
    return text.replace("|", "-")


def markdown_to_slack_mrkdwn(text: str | None) -> str:
    """Convert markdown and HTML links in free text to Slack links.

    - Markdown: [text](url) -> <url|text>
    - HTML: <a href="url">text</a> -> <url|text>
    - Links with a non-http(s) URL keep only their text
    - Everything else is escaped

    Args:
        text: Free text to convert. Can be None.

    Returns:
        Slack mrkdwn string. Empty string if input is None/empty.
    """
    if not text:
        return ""

    text = clean_control_characters(text)
    parts: list[str] = []
    position = 0

    for match in _LINK_PATTERN.finditer(text):
        parts.append(escape_slack_mrkdwn(text[position : match.start()]))

        if match.group("md_url"):
            url = match.group("md_url")
            label = match.group("md_text")
        else:
            anchor = _AnchorParser()
            anchor.feed(match.group(0))
            anchor.close()
            url = anchor.href or match.group("html_url")
            label = anchor.text or url

        safe_url = sanitize_url(url)
        if safe_url:
            parts.append(f"<{safe_url}|{escape_slack_link_text(label)}>")
        else:
            parts.append(escape_slack_mrkdwn(label))
        position = match.end()

    parts.append(escape_slack_mrkdwn(text[position:]))
    return "".join(parts)
