"""Chat message formatting shared by all chat targets.

ChatMessageFormatter holds every pretext template and attachment rule in one
place and dispatches on the event type. Subclasses only decide how links,
plain text and free text are rendered on their platform.
"""

from abc import abstractmethod
from typing import Callable

from webhooks.domain_models import (
    Event,
    EventKind,
    IssueAction,
    IssueEvent,
    MergeRequestAction,
    MergeRequestEvent,
    NoteableType,
    NoteEvent,
    PipelineEvent,
    PushEvent,
    TagPushEvent,
)
from webhooks.exceptions import UnsupportedKindError, ValidationError
from webhooks.models.notification import Attachment, NotificationMessage

from .base import BaseFormatter

# Attachment sidebar color per event kind
KIND_COLORS: dict[EventKind, str] = {
    EventKind.PUSH: "#345",
    EventKind.TAG_PUSH: "#345",
    EventKind.ISSUE: "#345",
    EventKind.MERGE_REQUEST: "#345",
    EventKind.NOTE: "#345",
    EventKind.PIPELINE: "#345",
}

ISSUE_VERBS: dict[IssueAction, str] = {
    IssueAction.OPEN: "opened",
    IssueAction.CLOSE: "closed",
    IssueAction.REOPEN: "reopened",
    IssueAction.UPDATE: "updated",
}

MERGE_REQUEST_VERBS: dict[MergeRequestAction, str] = {
    MergeRequestAction.OPEN: "opened",
    MergeRequestAction.CLOSE: "closed",
    MergeRequestAction.REOPEN: "reopened",
    MergeRequestAction.UPDATE: "updated",
    MergeRequestAction.MERGE: "merged",
}

PIPELINE_STATUSES: dict[str, str] = {
    "success": "passed",
}

_ACTOR = (("actor", str),)

# Slots every template interpolates, with their expected type
REQUIRED_FIELDS: dict[type, tuple[tuple[str, type], ...]] = {
    PushEvent: _ACTOR + (("ref", str), ("before", str), ("after", str)),
    TagPushEvent: _ACTOR + (("ref", str), ("before", str), ("after", str)),
    IssueEvent: _ACTOR + (("iid", int), ("title", str), ("url", str)),
    MergeRequestEvent: _ACTOR + (("iid", int), ("title", str), ("url", str)),
    NoteEvent: _ACTOR
    + (("note", str), ("url", str), ("target_ref", str), ("target_title", str)),
    PipelineEvent: _ACTOR
    + (("pipeline_id", int), ("ref", str), ("status", str), ("duration", int)),
}

COMMIT_FIELDS: tuple[tuple[str, type], ...] = (
    ("id", str),
    ("message", str),
    ("url", str),
    ("author_name", str),
)


def _check_fields(
    obj: object, fields: tuple[tuple[str, type], ...], prefix: str = ""
) -> None:
    for name, expected in fields:
        path = f"{prefix}{name}"
        value = getattr(obj, name, None)
        if value is None or value == "":
            raise ValidationError.missing(path)
        if isinstance(value, bool) or not isinstance(value, expected):
            article = "an integer" if expected is int else "a string"
            raise ValidationError(f"Field {path} must be {article}", field=path)


class ChatMessageFormatter(BaseFormatter):
    """Build pretext and attachments for every supported event kind."""

    def __init__(self) -> None:
        self._handlers: dict[type, Callable[[Event], NotificationMessage]] = {
            PushEvent: self._format_push,
            TagPushEvent: self._format_tag_push,
            IssueEvent: self._format_issue,
            MergeRequestEvent: self._format_merge_request,
            NoteEvent: self._format_note,
            PipelineEvent: self._format_pipeline,
        }

    @abstractmethod
    def link(self, url: str, text: str) -> str:
        """Render a hyperlink."""

    @abstractmethod
    def escape(self, text: str) -> str:
        """Render untrusted plain text (names, titles, refs)."""

    @abstractmethod
    def format_text(self, text: str) -> str:
        """Render untrusted free text (descriptions, notes, commit messages)."""

    def format(self, event: Event) -> NotificationMessage:
        handler = self._handlers.get(type(event))
        if handler is None:
            kind = getattr(event, "kind", None)
            raise UnsupportedKindError(getattr(kind, "value", kind) or type(event).__name__)
        self.validate(event)
        return handler(event)

    def validate(self, event: Event) -> None:
        """Check every slot the templates use.

        Raises:
            ValidationError: If a slot is absent, empty or of the wrong type.
        """
        _check_fields(event, REQUIRED_FIELDS[type(event)])

        project = getattr(event, "project", None)
        if project is None:
            raise ValidationError.missing("project")
        _check_fields(project, (("name", str), ("url", str)), prefix="project.")

        if isinstance(event, PushEvent):
            for index, commit in enumerate(event.commits):
                _check_fields(commit, COMMIT_FIELDS, prefix=f"commits[{index}].")

    def _project_link(self, event: Event) -> str:
        return self.link(event.project.url, event.project.name)

    def _description_attachments(
        self, kind: EventKind, description: str | None
    ) -> tuple[Attachment, ...]:
        return (Attachment(text=self.format_text(description or ""), color=KIND_COLORS[kind]),)

    def _format_issue(self, event: IssueEvent) -> NotificationMessage:
        verb = ISSUE_VERBS.get(event.action)
        if verb is None:
            raise ValidationError(f"Unsupported issue action: {event.action}", field="action")

        pretext = (
            f"{self.escape(event.actor)} {verb} issue "
            f"{self.link(event.url, f'#{event.iid}')} in {self._project_link(event)}: "
            f"{self.escape(event.title)}"
        )
        attachments: tuple[Attachment, ...] = ()
        if event.action is IssueAction.OPEN:
            attachments = self._description_attachments(EventKind.ISSUE, event.description)
        return NotificationMessage(pretext=pretext, attachments=attachments)

    def _format_merge_request(self, event: MergeRequestEvent) -> NotificationMessage:
        verb = MERGE_REQUEST_VERBS.get(event.action)
        if verb is None:
            raise ValidationError(
                f"Unsupported merge request action: {event.action}", field="action"
            )

        pretext = (
            f"{self.escape(event.actor)} {verb} merge request "
            f"{self.link(event.url, f'!{event.iid}')} in {self._project_link(event)}: "
            f"{self.escape(event.title)}"
        )
        attachments: tuple[Attachment, ...] = ()
        if event.action is MergeRequestAction.OPEN:
            attachments = self._description_attachments(
                EventKind.MERGE_REQUEST, event.description
            )
        return NotificationMessage(pretext=pretext, attachments=attachments)

    def _format_note(self, event: NoteEvent) -> NotificationMessage:
        if event.noteable_type is NoteableType.COMMIT:
            target = f"commit {event.target_ref[:8]}"
        elif event.noteable_type is NoteableType.ISSUE:
            target = f"issue #{event.target_ref}"
        elif event.noteable_type is NoteableType.MERGE_REQUEST:
            target = f"merge request !{event.target_ref}"
        else:
            target = f"snippet #{event.target_ref}"

        pretext = (
            f"{self.escape(event.actor)} commented on {self.link(event.url, target)} "
            f"in {self._project_link(event)}: {self.escape(event.target_title)}"
        )
        attachment = Attachment(
            text=self.format_text(event.note), color=KIND_COLORS[EventKind.NOTE]
        )
        return NotificationMessage(pretext=pretext, attachments=(attachment,))

    def _format_push(self, event: PushEvent) -> NotificationMessage:
        actor = self.escape(event.actor)
        project_link = self._project_link(event)
        branch = event.branch
        branch_url = f"{event.project.url}/commits/{branch}"

        if event.is_new_branch:
            pretext = (
                f"{actor} pushed new branch {self.link(branch_url, branch)} "
                f"to {project_link}"
            )
            return NotificationMessage(pretext=pretext)

        if event.is_removed_branch:
            pretext = f"{actor} removed branch {self.escape(branch)} from {project_link}"
            return NotificationMessage(pretext=pretext)

        compare_url = (
            f"{event.project.url}/compare/{event.before[:8]}...{event.after[:8]}"
        )
        pretext = (
            f"{actor} pushed to branch {self.link(branch_url, branch)} of "
            f"{project_link} ({self.link(compare_url, 'Compare changes')})"
        )
        if not event.commits:
            return NotificationMessage(pretext=pretext)

        lines = [
            f"{self.link(commit.url, commit.short_id)}: "
            f"{self.format_text(commit.title)} - {self.escape(commit.author_name)}"
            for commit in event.commits
        ]
        attachment = Attachment(text="\n".join(lines), color=KIND_COLORS[EventKind.PUSH])
        return NotificationMessage(pretext=pretext, attachments=(attachment,))

    def _format_tag_push(self, event: TagPushEvent) -> NotificationMessage:
        actor = self.escape(event.actor)
        project_link = self._project_link(event)
        tag = event.tag

        if event.is_removed_tag:
            pretext = f"{actor} removed tag {self.escape(tag)} from {project_link}"
            return NotificationMessage(pretext=pretext)

        tag_url = f"{event.project.url}/tags/{tag}"
        if event.is_new_tag:
            pretext = f"{actor} pushed new tag {self.link(tag_url, tag)} to {project_link}"
        else:
            # Tag moved to another commit
            compare_url = (
                f"{event.project.url}/compare/{event.before[:8]}...{event.after[:8]}"
            )
            pretext = (
                f"{actor} pushed to tag {self.link(tag_url, tag)} of "
                f"{project_link} ({self.link(compare_url, 'Compare changes')})"
            )
        return NotificationMessage(pretext=pretext)

    def _format_pipeline(self, event: PipelineEvent) -> NotificationMessage:
        project_url = event.project.url
        pipeline_url = f"{project_url}/pipelines/{event.pipeline_id}"
        if event.tag:
            ref_url = f"{project_url}/tags/{event.ref}"
        else:
            ref_url = f"{project_url}/commits/{event.ref}"

        status = PIPELINE_STATUSES.get(event.status, event.status)
        unit = "second" if event.duration == 1 else "seconds"
        pretext = (
            f"{self._project_link(event)}: Pipeline "
            f"{self.link(pipeline_url, f'#{event.pipeline_id}')} of {event.ref_type} "
            f"{self.link(ref_url, event.ref)} by {self.escape(event.actor)} "
            f"{self.escape(status)} in {event.duration} {unit}"
        )
        return NotificationMessage(pretext=pretext)
