"""Webhook models package.

Exports notification models produced by the formatters.
"""

from .notification import Attachment, NotificationMessage

__all__ = [
    "Attachment",
    "NotificationMessage",
]
