"""Typed webhook events.

Each event kind delivered by the source-control webhook is decoded into one
of the frozen dataclasses below before it reaches a formatter or a project
service. Decoding lives in ``webhooks.providers.gitlab``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Commit SHA sent as ``before``/``after`` when a ref is created or deleted
BLANK_SHA = "0" * 40


class EventKind(str, Enum):
    """Webhook ``object_kind`` values."""

    PUSH = "push"
    TAG_PUSH = "tag_push"
    ISSUE = "issue"
    MERGE_REQUEST = "merge_request"
    NOTE = "note"
    PIPELINE = "pipeline"


class IssueAction(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    REOPEN = "reopen"
    UPDATE = "update"


class MergeRequestAction(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    REOPEN = "reopen"
    UPDATE = "update"
    MERGE = "merge"


class NoteableType(str, Enum):
    """What a note was left on."""

    COMMIT = "Commit"
    ISSUE = "Issue"
    MERGE_REQUEST = "MergeRequest"
    SNIPPET = "Snippet"


@dataclass(frozen=True, slots=True)
class Project:
    """Project an event belongs to.

    Attributes:
        name: Project display name.
        url: Project web URL.
        path_with_namespace: Full path (``group/project``) if known.
        id: Numeric project id if known.
    """

    name: str
    url: str
    path_with_namespace: str | None = None
    id: int | None = None

    @property
    def path(self) -> str:
        return self.path_with_namespace or self.name


@dataclass(frozen=True, slots=True)
class Commit:
    id: str
    message: str
    url: str
    author_name: str

    @property
    def short_id(self) -> str:
        return self.id[:8]

    @property
    def title(self) -> str:
        """First line of the commit message."""
        return self.message.strip().split("\n", 1)[0]


def _branch_name(ref: str, prefix: str) -> str:
    return ref[len(prefix) :] if ref.startswith(prefix) else ref


@dataclass(frozen=True, slots=True)
class PushEvent:
    """Commits pushed to a branch.

    ``raw`` keeps the original payload for the email path; it takes no part
    in equality so that two deliveries of the same push compare equal.
    """

    actor: str
    project: Project
    ref: str
    before: str
    after: str
    commits: tuple[Commit, ...] = ()
    total_commits_count: int = 0
    raw: dict[str, Any] = field(
        default_factory=dict, compare=False, hash=False, repr=False
    )

    kind = EventKind.PUSH

    @property
    def branch(self) -> str:
        return _branch_name(self.ref, "refs/heads/")

    @property
    def is_new_branch(self) -> bool:
        return self.before == BLANK_SHA

    @property
    def is_removed_branch(self) -> bool:
        return self.after == BLANK_SHA


@dataclass(frozen=True, slots=True)
class TagPushEvent:
    actor: str
    project: Project
    ref: str
    before: str
    after: str

    kind = EventKind.TAG_PUSH

    @property
    def tag(self) -> str:
        return _branch_name(self.ref, "refs/tags/")

    @property
    def is_new_tag(self) -> bool:
        return self.before == BLANK_SHA

    @property
    def is_removed_tag(self) -> bool:
        return self.after == BLANK_SHA


@dataclass(frozen=True, slots=True)
class IssueEvent:
    """An issue was opened, closed, reopened or updated.

    Attributes:
        actor: Display name of the user who acted.
        project: Owning project.
        iid: Project-scoped issue number.
        title: Issue title.
        url: Issue web URL.
        action: What happened to the issue.
        state: Resulting state (``opened``, ``closed``, ``reopened``).
        description: Free-text issue body.
    """

    actor: str
    project: Project
    iid: int
    title: str
    url: str
    action: IssueAction
    state: str | None = None
    description: str | None = None

    kind = EventKind.ISSUE


@dataclass(frozen=True, slots=True)
class MergeRequestEvent:
    actor: str
    project: Project
    iid: int
    title: str
    url: str
    action: MergeRequestAction
    state: str | None = None
    description: str | None = None
    source_branch: str | None = None
    target_branch: str | None = None

    kind = EventKind.MERGE_REQUEST


@dataclass(frozen=True, slots=True)
class NoteEvent:
    """A comment on a commit, issue, merge request or snippet.

    Attributes:
        note: Comment body.
        url: Comment web URL.
        noteable_type: Kind of object commented on.
        target_ref: Commit SHA, issue/merge request iid or snippet id.
        target_title: Title of the commented-on object.
    """

    actor: str
    project: Project
    note: str
    url: str
    noteable_type: NoteableType
    target_ref: str
    target_title: str

    kind = EventKind.NOTE


@dataclass(frozen=True, slots=True)
class PipelineEvent:
    actor: str
    project: Project
    pipeline_id: int
    ref: str
    status: str
    tag: bool = False
    duration: int = 0

    kind = EventKind.PIPELINE

    @property
    def ref_type(self) -> str:
        return "tag" if self.tag else "branch"


Event = (
    PushEvent
    | TagPushEvent
    | IssueEvent
    | MergeRequestEvent
    | NoteEvent
    | PipelineEvent
)
