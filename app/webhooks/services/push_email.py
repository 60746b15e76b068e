"""Commit summary emails for push events.

EmailsOnPushWorker receives the raw push payload from the job queue, decodes
it, and sends one plain-text message to every recipient with Django's mail
API.
"""

import logging
from typing import Any, Iterable

from django.conf import settings
from django.core.mail import send_mail

from ..domain_models import EventKind, PushEvent
from ..providers.gitlab import GitLabProvider
from .job_queue import JobQueue, job_queue

logger = logging.getLogger(__name__)


def parse_recipients(recipients: str | Iterable[str] | None) -> list[str]:
    """Split a whitespace-separated recipient list, dropping duplicates.

    Args:
        recipients: String of addresses separated by whitespace, or an
            iterable of addresses.

    Returns:
        Addresses in their original order.
    """
    if not recipients:
        return []
    if isinstance(recipients, str):
        recipients = recipients.split()

    seen: list[str] = []
    for address in recipients:
        address = address.strip()
        if address and address not in seen:
            seen.append(address)
    return seen


def build_subject(event: PushEvent) -> str:
    prefix = f"[Git][{event.project.path}]"

    if event.is_new_branch:
        return f"{prefix} Pushed new branch {event.branch}"
    if event.is_removed_branch:
        return f"{prefix} Deleted branch {event.branch}"

    prefix = f"{prefix}[{event.branch}]"
    if not event.commits:
        return f"{prefix} No new commits"
    if len(event.commits) == 1:
        return f"{prefix} {event.commits[0].title}"
    return f"{prefix} {len(event.commits)} commits: {event.commits[0].title}"


def build_body(event: PushEvent) -> str:
    project = event.project

    if event.is_removed_branch:
        return f"{event.actor} deleted branch {event.branch} at {project.path}\n"

    action = "pushed new branch" if event.is_new_branch else "pushed to"
    lines = [f"{event.actor} {action} {event.branch} at {project.path}", ""]

    if event.commits:
        lines.append("Commits:")
        lines.append("")
        for commit in event.commits:
            lines.append(f"{commit.id} by {commit.author_name}")
            lines.append(f"{commit.url}")
            lines.extend(f"    {line}" for line in commit.message.strip().splitlines())
            lines.append("")

        hidden = event.total_commits_count - len(event.commits)
        if hidden > 0:
            lines.append(f"...and {hidden} more commits")
            lines.append("")

    if not event.is_new_branch:
        compare_url = f"{project.url}/compare/{event.before[:8]}...{event.after[:8]}"
        lines.append(f"Compare changes: {compare_url}")

    lines.append(f"Project: {project.url}")
    return "\n".join(lines) + "\n"


class EmailsOnPushWorker:
    """Send the commit summary for one push"""

    def __init__(self, provider: GitLabProvider | None = None):
        self.provider = provider or GitLabProvider()

    @classmethod
    def perform_async(
        cls,
        project_id: int | None,
        recipients: str | list[str],
        push_data: dict[str, Any],
        queue: JobQueue | None = None,
    ) -> None:
        """Enqueue the email job"""
        (queue or job_queue).enqueue(cls().perform, project_id, recipients, push_data)

    def perform(
        self,
        project_id: int | None,
        recipients: str | list[str],
        push_data: dict[str, Any],
    ) -> int:
        """Build and send the email.

        Returns:
            Number of messages sent (0 or 1).
        """
        addresses = parse_recipients(recipients)
        if not addresses:
            logger.warning(
                "No recipients for push email", extra={"project_id": project_id}
            )
            return 0

        event = self.provider.parse_payload(push_data, EventKind.PUSH.value)

        sent = send_mail(
            subject=build_subject(event),
            message=build_body(event),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=addresses,
            fail_silently=False,
        )
        logger.info(
            "Sent push email",
            extra={
                "project_id": project_id,
                "recipients": len(addresses),
                "branch": event.branch,
            },
        )
        return sent
