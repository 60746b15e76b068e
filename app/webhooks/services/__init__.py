"""Webhook services package.

Exports project services, the job queue and the chat client.
"""

from .job_queue import JobQueue, job_queue
from .project_services import (
    EmailsOnPushService,
    MattermostService,
    ProjectService,
    SlackService,
    execute_services,
    load_project_services,
)
from .push_email import EmailsOnPushWorker
from .slack_client import SlackClient

__all__ = [
    "EmailsOnPushService",
    "EmailsOnPushWorker",
    "JobQueue",
    "MattermostService",
    "ProjectService",
    "SlackClient",
    "SlackService",
    "execute_services",
    "job_queue",
    "load_project_services",
]
