from .base import WebhookProvider
from .gitlab import GitLabProvider

__all__ = [
    "GitLabProvider",
    "WebhookProvider",
]
