# providers/gitlab.py
import hmac
import json
import logging
from typing import Any, Callable, Dict, Optional

from django.http import HttpRequest

from ..domain_models import (
    Commit,
    Event,
    EventKind,
    IssueAction,
    IssueEvent,
    MergeRequestAction,
    MergeRequestEvent,
    NoteableType,
    NoteEvent,
    PipelineEvent,
    Project,
    PushEvent,
    TagPushEvent,
)
from ..exceptions import UnsupportedKindError, ValidationError
from .base import WebhookProvider

logger = logging.getLogger(__name__)


def _require(data: Any, key: str, path: str) -> Any:
    """Return ``data[key]``, failing when it is absent or null"""
    if not isinstance(data, dict):
        raise ValidationError.missing(path)
    value = data.get(key)
    if value is None:
        raise ValidationError.missing(path)
    return value


def _require_str(data: Any, key: str, path: str) -> str:
    value = _require(data, key, path)
    if not isinstance(value, str):
        raise ValidationError(f"Field {path} must be a string", field=path)
    return value


def _require_int(data: Any, key: str, path: str) -> int:
    value = _require(data, key, path)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Field {path} must be an integer", field=path)
    return value


def _require_dict(data: Any, key: str, path: str) -> Dict[str, Any]:
    value = _require(data, key, path)
    if not isinstance(value, dict):
        raise ValidationError(f"Field {path} must be an object", field=path)
    return value


def _optional_str(data: Dict[str, Any], key: str, path: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"Field {path} must be a string", field=path)
    return value


class GitLabProvider(WebhookProvider):
    """Handle GitLab project webhooks"""

    TOKEN_HEADER = "X-Gitlab-Token"
    EVENT_HEADER = "X-Gitlab-Event"

    # Used only when the body carries no object_kind
    EVENT_HEADER_MAPPING = {
        "Push Hook": EventKind.PUSH,
        "Tag Push Hook": EventKind.TAG_PUSH,
        "Issue Hook": EventKind.ISSUE,
        "Merge Request Hook": EventKind.MERGE_REQUEST,
        "Note Hook": EventKind.NOTE,
        "Pipeline Hook": EventKind.PIPELINE,
    }

    def __init__(self, webhook_secret: str = ""):
        super().__init__(webhook_secret)
        self._decoders: Dict[EventKind, Callable[[Dict[str, Any]], Event]] = {
            EventKind.PUSH: self._parse_push,
            EventKind.TAG_PUSH: self._parse_tag_push,
            EventKind.ISSUE: self._parse_issue,
            EventKind.MERGE_REQUEST: self._parse_merge_request,
            EventKind.NOTE: self._parse_note,
            EventKind.PIPELINE: self._parse_pipeline,
        }

    def validate_webhook(self, request: HttpRequest) -> bool:
        """Compare the secret token header against the configured secret"""
        if not self.webhook_secret:
            logger.debug("No GitLab webhook token configured, skipping validation")
            return True

        token = request.headers.get(self.TOKEN_HEADER)
        if not token:
            return False

        return hmac.compare_digest(
            token.encode("utf-8"), self.webhook_secret.encode("utf-8")
        )

    def parse_webhook(self, request: HttpRequest) -> Event:
        """Parse GitLab webhook request body"""
        if request.content_type != "application/json":
            raise ValidationError("Invalid content type")

        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError("Invalid JSON data") from e

        if not isinstance(data, dict):
            raise ValidationError("Invalid JSON data")

        kind = data.get("object_kind")
        if kind is None:
            header = request.headers.get(self.EVENT_HEADER)
            mapped = self.EVENT_HEADER_MAPPING.get(header or "")
            if mapped is None:
                raise ValidationError.missing("object_kind")
            kind = mapped.value

        return self.parse_payload(data, kind)

    def parse_payload(self, data: Any, kind: Optional[str] = None) -> Event:
        """Decode a payload mapping into the event for its kind"""
        if not isinstance(data, dict):
            raise ValidationError("Payload must be an object")

        if kind is None:
            kind = data.get("object_kind")
            if kind is None:
                raise ValidationError.missing("object_kind")

        try:
            event_kind = EventKind(kind)
        except ValueError:
            raise UnsupportedKindError(kind) from None

        event = self._decoders[event_kind](data)
        logger.debug(
            "Decoded webhook event",
            extra={"event_kind": event_kind.value, "project": event.project.name},
        )
        return event

    def _parse_actor(self, data: Dict[str, Any]) -> str:
        user = data.get("user")
        if isinstance(user, dict):
            actor = user.get("username") or user.get("name")
        else:
            actor = data.get("user_username") or data.get("user_name")
        if not actor:
            raise ValidationError.missing("user.username")
        if not isinstance(actor, str):
            raise ValidationError("Field user.username must be a string", field="user.username")
        return actor

    def _parse_project(self, data: Dict[str, Any]) -> Project:
        if "project_name" in data or "project_url" in data:
            name = _require_str(data, "project_name", "project_name")
            url = _require_str(data, "project_url", "project_url")
            path = None
        elif isinstance(data.get("project"), dict):
            project = data["project"]
            name = _require_str(project, "name", "project.name")
            url = _require_str(project, "web_url", "project.web_url")
            path = _optional_str(project, "path_with_namespace", "project.path_with_namespace")
        else:
            repository = _require_dict(data, "repository", "project")
            name = _require_str(repository, "name", "repository.name")
            url = _require_str(repository, "homepage", "repository.homepage")
            path = None

        project_id = data.get("project_id")
        if project_id is None and isinstance(data.get("project"), dict):
            project_id = data["project"].get("id")
        if project_id is not None and (
            isinstance(project_id, bool) or not isinstance(project_id, int)
        ):
            raise ValidationError("Field project_id must be an integer", field="project_id")

        return Project(name=name, url=url, path_with_namespace=path, id=project_id)

    def _parse_push(self, data: Dict[str, Any]) -> PushEvent:
        raw_commits = data.get("commits") or []
        if not isinstance(raw_commits, list):
            raise ValidationError("Field commits must be a list", field="commits")

        commits = []
        for index, raw in enumerate(raw_commits):
            path = f"commits[{index}]"
            author = _require_dict(raw, "author", f"{path}.author")
            commits.append(
                Commit(
                    id=_require_str(raw, "id", f"{path}.id"),
                    message=_require_str(raw, "message", f"{path}.message"),
                    url=_require_str(raw, "url", f"{path}.url"),
                    author_name=_require_str(author, "name", f"{path}.author.name"),
                )
            )

        total = data.get("total_commits_count")
        if total is None:
            total = len(commits)
        elif isinstance(total, bool) or not isinstance(total, int):
            raise ValidationError(
                "Field total_commits_count must be an integer",
                field="total_commits_count",
            )

        return PushEvent(
            actor=self._parse_actor(data),
            project=self._parse_project(data),
            ref=_require_str(data, "ref", "ref"),
            before=_require_str(data, "before", "before"),
            after=_require_str(data, "after", "after"),
            commits=tuple(commits),
            total_commits_count=total,
            raw=data,
        )

    def _parse_tag_push(self, data: Dict[str, Any]) -> TagPushEvent:
        return TagPushEvent(
            actor=self._parse_actor(data),
            project=self._parse_project(data),
            ref=_require_str(data, "ref", "ref"),
            before=_require_str(data, "before", "before"),
            after=_require_str(data, "after", "after"),
        )

    def _parse_issue(self, data: Dict[str, Any]) -> IssueEvent:
        attrs = _require_dict(data, "object_attributes", "object_attributes")
        action = _require_str(attrs, "action", "object_attributes.action")
        try:
            issue_action = IssueAction(action)
        except ValueError:
            raise ValidationError(
                f"Unsupported issue action: {action}", field="object_attributes.action"
            ) from None

        return IssueEvent(
            actor=self._parse_actor(data),
            project=self._parse_project(data),
            iid=_require_int(attrs, "iid", "object_attributes.iid"),
            title=_require_str(attrs, "title", "object_attributes.title"),
            url=_require_str(attrs, "url", "object_attributes.url"),
            action=issue_action,
            state=_optional_str(attrs, "state", "object_attributes.state"),
            description=_optional_str(
                attrs, "description", "object_attributes.description"
            ),
        )

    def _parse_merge_request(self, data: Dict[str, Any]) -> MergeRequestEvent:
        attrs = _require_dict(data, "object_attributes", "object_attributes")
        action = _require_str(attrs, "action", "object_attributes.action")
        try:
            mr_action = MergeRequestAction(action)
        except ValueError:
            raise ValidationError(
                f"Unsupported merge request action: {action}",
                field="object_attributes.action",
            ) from None

        return MergeRequestEvent(
            actor=self._parse_actor(data),
            project=self._parse_project(data),
            iid=_require_int(attrs, "iid", "object_attributes.iid"),
            title=_require_str(attrs, "title", "object_attributes.title"),
            url=_require_str(attrs, "url", "object_attributes.url"),
            action=mr_action,
            state=_optional_str(attrs, "state", "object_attributes.state"),
            description=_optional_str(
                attrs, "description", "object_attributes.description"
            ),
            source_branch=_optional_str(
                attrs, "source_branch", "object_attributes.source_branch"
            ),
            target_branch=_optional_str(
                attrs, "target_branch", "object_attributes.target_branch"
            ),
        )

    def _parse_note(self, data: Dict[str, Any]) -> NoteEvent:
        attrs = _require_dict(data, "object_attributes", "object_attributes")
        noteable = _require_str(
            attrs, "noteable_type", "object_attributes.noteable_type"
        )
        try:
            noteable_type = NoteableType(noteable)
        except ValueError:
            raise ValidationError(
                f"Unsupported noteable type: {noteable}",
                field="object_attributes.noteable_type",
            ) from None

        if noteable_type is NoteableType.COMMIT:
            commit = _require_dict(data, "commit", "commit")
            target_ref = _require_str(commit, "id", "commit.id")
            message = _require_str(commit, "message", "commit.message")
            target_title = message.strip().split("\n", 1)[0]
        elif noteable_type is NoteableType.ISSUE:
            issue = _require_dict(data, "issue", "issue")
            target_ref = str(_require_int(issue, "iid", "issue.iid"))
            target_title = _require_str(issue, "title", "issue.title")
        elif noteable_type is NoteableType.MERGE_REQUEST:
            merge_request = _require_dict(data, "merge_request", "merge_request")
            target_ref = str(_require_int(merge_request, "iid", "merge_request.iid"))
            target_title = _require_str(merge_request, "title", "merge_request.title")
        else:
            snippet = _require_dict(data, "snippet", "snippet")
            target_ref = str(_require_int(snippet, "id", "snippet.id"))
            target_title = _require_str(snippet, "title", "snippet.title")

        return NoteEvent(
            actor=self._parse_actor(data),
            project=self._parse_project(data),
            note=_require_str(attrs, "note", "object_attributes.note"),
            url=_require_str(attrs, "url", "object_attributes.url"),
            noteable_type=noteable_type,
            target_ref=target_ref,
            target_title=target_title,
        )

    def _parse_pipeline(self, data: Dict[str, Any]) -> PipelineEvent:
        attrs = _require_dict(data, "object_attributes", "object_attributes")

        tag = attrs.get("tag", False)
        if not isinstance(tag, bool):
            raise ValidationError(
                "Field object_attributes.tag must be a boolean",
                field="object_attributes.tag",
            )

        duration = attrs.get("duration")
        if duration is None:
            duration = 0
        elif isinstance(duration, bool) or not isinstance(duration, (int, float)):
            raise ValidationError(
                "Field object_attributes.duration must be a number",
                field="object_attributes.duration",
            )

        return PipelineEvent(
            actor=self._parse_actor(data),
            project=self._parse_project(data),
            pipeline_id=_require_int(attrs, "id", "object_attributes.id"),
            ref=_require_str(attrs, "ref", "object_attributes.ref"),
            status=_require_str(attrs, "status", "object_attributes.status"),
            tag=tag,
            duration=int(duration),
        )
