"""Project services: integrations that receive a project's webhook events.

Chat services (Slack, Mattermost) format each accepted event and post it to
an incoming webhook. EmailsOnPushService hands push payloads to the email
worker. Services are configured through the PROJECT_SERVICES setting.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterable

from django.conf import settings

from ..domain_models import Event, EventKind, PipelineEvent
from ..exceptions import ServiceConfigurationError
from ..formatters import FormatterRegistry
from ..models.notification import NotificationMessage
from .job_queue import JobQueue, job_queue
from .push_email import EmailsOnPushWorker, parse_recipients
from .slack_client import SlackClient

logger = logging.getLogger(__name__)

# Event kind -> toggle attribute on ProjectService
EVENT_FLAGS: dict[EventKind, str] = {
    EventKind.PUSH: "push_events",
    EventKind.TAG_PUSH: "tag_push_events",
    EventKind.ISSUE: "issues_events",
    EventKind.MERGE_REQUEST: "merge_requests_events",
    EventKind.NOTE: "note_events",
    EventKind.PIPELINE: "pipeline_events",
}


class ProjectService(ABC):
    """Base class for project services.

    Attributes:
        project_id: Project this service belongs to, if known.
        active: Whether the service receives events.
        properties: Service-specific settings (webhook URL, recipients...).
        push_events, tag_push_events, issues_events, merge_requests_events,
        note_events, pipeline_events: Per-kind toggles.
    """

    # Properties that must be present when the service is active
    required_properties: ClassVar[tuple[str, ...]] = ()
    # Event kinds this service can handle at all
    supported_events: ClassVar[tuple[EventKind, ...]] = tuple(EventKind)

    def __init__(
        self,
        project_id: int | None = None,
        active: bool = False,
        properties: dict[str, Any] | None = None,
        **event_flags: bool,
    ) -> None:
        self.project_id = project_id
        self.active = active
        self.properties = dict(properties or {})

        unknown = set(event_flags) - set(EVENT_FLAGS.values())
        if unknown:
            raise ServiceConfigurationError(
                f"Unknown event toggles: {', '.join(sorted(unknown))}"
            )
        for flag in EVENT_FLAGS.values():
            setattr(self, flag, event_flags.get(flag, True))

    @property
    @abstractmethod
    def title(self) -> str:
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @abstractmethod
    def to_param(self) -> str:
        """URL/config identifier of the service type."""

    @abstractmethod
    def fields(self) -> list[dict[str, Any]]:
        """Form fields describing the service properties."""

    @abstractmethod
    def execute(self, event: Event) -> bool:
        """Handle an event.

        Returns:
            True if the event produced a notification, False if skipped.
        """

    def validate(self) -> None:
        """Check required properties of an active service.

        Raises:
            ServiceConfigurationError: If a required property is blank.
        """
        if not self.active:
            return
        missing = [name for name in self.required_properties if not self.properties.get(name)]
        if missing:
            raise ServiceConfigurationError(
                f"{self.title}: missing required settings: {', '.join(missing)}"
            )

    def supports(self, event: Event) -> bool:
        """Whether this service is switched on for the event's kind."""
        if event.kind not in self.supported_events:
            return False
        return bool(getattr(self, EVENT_FLAGS[event.kind]))

    def should_notify(self, event: Event) -> bool:
        """Whether executing the service for this event would do anything."""
        return self.supports(event)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} project_id={self.project_id} active={self.active}>"


class ChatService(ProjectService):
    """Post formatted notifications to a chat incoming webhook."""

    formatter_target: ClassVar[str]
    required_properties = ("webhook",)

    @property
    def webhook(self) -> str | None:
        return self.properties.get("webhook")

    @property
    def channel(self) -> str | None:
        return self.properties.get("channel") or None

    @property
    def username(self) -> str | None:
        return self.properties.get("username") or None

    @property
    def notify_only_broken_pipelines(self) -> bool:
        return bool(self.properties.get("notify_only_broken_pipelines", False))

    def to_param(self) -> str:
        return self.formatter_target

    def fields(self) -> list[dict[str, Any]]:
        return [
            {"type": "text", "name": "webhook", "placeholder": self.webhook_placeholder},
            {"type": "text", "name": "channel", "placeholder": "#general"},
            {"type": "text", "name": "username", "placeholder": "username"},
            {"type": "checkbox", "name": "notify_only_broken_pipelines"},
        ]

    @property
    def webhook_placeholder(self) -> str:
        return "https://hooks.example.com/..."

    def should_notify(self, event: Event) -> bool:
        if not self.supports(event):
            return False
        if isinstance(event, PipelineEvent):
            if event.status == "success":
                return not self.notify_only_broken_pipelines
            return event.status == "failed"
        return True

    def format(self, event: Event) -> NotificationMessage:
        return FormatterRegistry.get(self.formatter_target).format(event)

    def send(self, message: NotificationMessage) -> bool:
        client = SlackClient(
            webhook_url=self.webhook or "",
            channel=self.channel,
            username=self.username,
        )
        return client.send_notification(message)

    def execute(self, event: Event) -> bool:
        if not self.should_notify(event):
            logger.debug(
                "Skipping event for chat service",
                extra={"service": self.to_param(), "event_kind": event.kind.value},
            )
            return False

        message = self.format(event)
        self.send(message)
        logger.info(
            "Posted chat notification",
            extra={
                "service": self.to_param(),
                "event_kind": event.kind.value,
                "project": event.project.name,
            },
        )
        return True


class SlackService(ChatService):
    formatter_target = "slack"

    @property
    def title(self) -> str:
        return "Slack"

    @property
    def description(self) -> str:
        return "A team communication tool for the 21st century"

    @property
    def webhook_placeholder(self) -> str:
        return "https://hooks.slack.com/services/..."


class MattermostService(ChatService):
    formatter_target = "mattermost"

    @property
    def title(self) -> str:
        return "Mattermost notifications"

    @property
    def description(self) -> str:
        return "Receive event notifications in Mattermost"

    @property
    def webhook_placeholder(self) -> str:
        return "http://mattermost.example.com/hooks/..."


class EmailsOnPushService(ProjectService):
    required_properties = ("recipients",)
    supported_events = (EventKind.PUSH,)

    @property
    def title(self) -> str:
        return "Emails on push"

    @property
    def description(self) -> str:
        return "Email the commits and diff of each push to a list of recipients."

    @property
    def recipients(self) -> str | None:
        return self.properties.get("recipients")

    def to_param(self) -> str:
        return "emails_on_push"

    def fields(self) -> list[dict[str, Any]]:
        return [
            {
                "type": "textarea",
                "name": "recipients",
                "placeholder": "Emails separated by whitespace",
            },
        ]

    def execute(self, event: Event) -> bool:
        if event.kind is not EventKind.PUSH:
            return False

        project_id = self.project_id if self.project_id is not None else event.project.id
        EmailsOnPushWorker.perform_async(
            project_id, parse_recipients(self.recipients), event.raw
        )
        return True


SERVICE_CLASSES: dict[str, type[ProjectService]] = {
    "slack": SlackService,
    "mattermost": MattermostService,
    "emails_on_push": EmailsOnPushService,
}


def build_service(config: dict[str, Any]) -> ProjectService:
    """Instantiate and validate one service from its configuration dict."""
    config = dict(config)
    service_type = config.pop("type", None)
    service_class = SERVICE_CLASSES.get(service_type)
    if service_class is None:
        raise ServiceConfigurationError(f"Unknown service type: {service_type}")

    try:
        service = service_class(**config)
    except TypeError as e:
        raise ServiceConfigurationError(
            f"Invalid configuration for {service_type}: {e}"
        ) from e
    service.validate()
    return service


def load_project_services(
    configs: Iterable[dict[str, Any]] | None = None,
) -> list[ProjectService]:
    """Build the configured services.

    Args:
        configs: Service configuration dicts; defaults to the
            PROJECT_SERVICES setting.

    Raises:
        ServiceConfigurationError: If any configuration is invalid.
    """
    if configs is None:
        configs = getattr(settings, "PROJECT_SERVICES", [])
    return [build_service(config) for config in configs]


def execute_services(
    event: Event,
    services: Iterable[ProjectService],
    queue: JobQueue | None = None,
) -> list[str]:
    """Enqueue every active service that would act on the event.

    Returns:
        Identifiers of the services that were enqueued.
    """
    queue = queue or job_queue
    enqueued = []
    for service in services:
        if not service.active or not service.should_notify(event):
            continue
        queue.enqueue(service.execute, event)
        enqueued.append(service.to_param())
    return enqueued
