"""Tests for GitLab webhook decoding and token validation."""

import json

import pytest

from webhooks.domain_models import (
    BLANK_SHA,
    Commit,
    IssueAction,
    IssueEvent,
    NoteableType,
    PipelineEvent,
    Project,
    PushEvent,
)
from webhooks.exceptions import UnsupportedKindError, ValidationError
from webhooks.providers.gitlab import GitLabProvider

WEBHOOK_PATH = "/webhooks/gitlab/"


class TestGitLabValidation:
    """Test secret token validation"""

    def test_valid_token(self, provider, request_factory) -> None:
        request = request_factory.post(
            WEBHOOK_PATH,
            data="{}",
            content_type="application/json",
            headers={"X-Gitlab-Token": "test-gitlab-token"},
        )

        assert provider.validate_webhook(request) is True

    def test_wrong_token(self, provider, request_factory) -> None:
        request = request_factory.post(
            WEBHOOK_PATH,
            data="{}",
            content_type="application/json",
            headers={"X-Gitlab-Token": "wrong"},
        )

        assert provider.validate_webhook(request) is False

    def test_missing_token(self, provider, request_factory) -> None:
        request = request_factory.post(
            WEBHOOK_PATH, data="{}", content_type="application/json"
        )

        assert provider.validate_webhook(request) is False

    def test_no_secret_configured(self, request_factory) -> None:
        request = request_factory.post(
            WEBHOOK_PATH, data="{}", content_type="application/json"
        )

        assert GitLabProvider("").validate_webhook(request) is True


class TestGitLabRequestParsing:
    """Test request body handling"""

    def test_parse_json_body(self, provider, request_factory, issue_payload) -> None:
        request = request_factory.post(
            WEBHOOK_PATH, data=json.dumps(issue_payload), content_type="application/json"
        )

        event = provider.parse_webhook(request)

        assert isinstance(event, IssueEvent)

    def test_invalid_content_type(self, provider, request_factory) -> None:
        request = request_factory.post(WEBHOOK_PATH, data="x", content_type="text/plain")

        with pytest.raises(ValidationError, match="Invalid content type"):
            provider.parse_webhook(request)

    @pytest.mark.parametrize("body", ["{not json", "[1, 2]"])
    def test_invalid_json(self, provider, request_factory, body) -> None:
        request = request_factory.post(
            WEBHOOK_PATH, data=body, content_type="application/json"
        )

        with pytest.raises(ValidationError, match="Invalid JSON data"):
            provider.parse_webhook(request)

    def test_kind_from_event_header(self, provider, request_factory, issue_payload) -> None:
        """Test the event header is used when the body has no object_kind."""
        del issue_payload["object_kind"]
        request = request_factory.post(
            WEBHOOK_PATH,
            data=json.dumps(issue_payload),
            content_type="application/json",
            headers={"X-Gitlab-Event": "Issue Hook"},
        )

        assert isinstance(provider.parse_webhook(request), IssueEvent)

    def test_missing_kind_without_header(
        self, provider, request_factory, issue_payload
    ) -> None:
        del issue_payload["object_kind"]
        request = request_factory.post(
            WEBHOOK_PATH, data=json.dumps(issue_payload), content_type="application/json"
        )

        with pytest.raises(ValidationError) as excinfo:
            provider.parse_webhook(request)

        assert excinfo.value.field == "object_kind"


class TestPayloadKinds:
    def test_unknown_kind(self, provider) -> None:
        with pytest.raises(UnsupportedKindError) as excinfo:
            provider.parse_payload({"object_kind": "wiki_page"})

        assert excinfo.value.kind == "wiki_page"
        assert excinfo.value.error_code == "UNSUPPORTED_KIND"

    def test_missing_kind(self, provider) -> None:
        with pytest.raises(ValidationError, match="object_kind"):
            provider.parse_payload({"user": {"username": "root"}})

    def test_payload_not_an_object(self, provider) -> None:
        with pytest.raises(ValidationError):
            provider.parse_payload(["issue"])


class TestIssueDecoding:
    """Test issue payload decoding"""

    def test_decode_issue(self, provider, issue_payload) -> None:
        event = provider.parse_payload(issue_payload)

        assert event == IssueEvent(
            actor="username",
            project=Project(name="project_name", url="somewhere.com"),
            iid=100,
            title="Issue title",
            url="url",
            action=IssueAction.OPEN,
            state="opened",
            description="issue description",
        )

    def test_missing_iid(self, provider, issue_payload) -> None:
        del issue_payload["object_attributes"]["iid"]

        with pytest.raises(ValidationError) as excinfo:
            provider.parse_payload(issue_payload)

        assert excinfo.value.field == "object_attributes.iid"
        assert excinfo.value.message == "Missing required field: object_attributes.iid"

    def test_null_title(self, provider, issue_payload) -> None:
        issue_payload["object_attributes"]["title"] = None

        with pytest.raises(ValidationError, match="object_attributes.title"):
            provider.parse_payload(issue_payload)

    @pytest.mark.parametrize("iid", ["100", True, 1.5])
    def test_iid_must_be_integer(self, provider, issue_payload, iid) -> None:
        issue_payload["object_attributes"]["iid"] = iid

        with pytest.raises(ValidationError, match="must be an integer"):
            provider.parse_payload(issue_payload)

    def test_unknown_action(self, provider, issue_payload) -> None:
        issue_payload["object_attributes"]["action"] = "approve"

        with pytest.raises(ValidationError, match="Unsupported issue action"):
            provider.parse_payload(issue_payload)

    def test_actor_falls_back_to_name(self, provider, issue_payload) -> None:
        issue_payload["user"] = {"name": "Administrator"}

        assert provider.parse_payload(issue_payload).actor == "Administrator"

    def test_missing_actor(self, provider, issue_payload) -> None:
        del issue_payload["user"]

        with pytest.raises(ValidationError, match="user.username"):
            provider.parse_payload(issue_payload)

    def test_missing_project(self, provider, issue_payload) -> None:
        del issue_payload["project_name"]
        del issue_payload["project_url"]

        with pytest.raises(ValidationError, match="project"):
            provider.parse_payload(issue_payload)

    def test_project_from_repository(self, provider, issue_payload) -> None:
        del issue_payload["project_name"]
        del issue_payload["project_url"]
        issue_payload["repository"] = {
            "name": "Diaspora",
            "homepage": "http://example.com/mike/diaspora",
        }

        project = provider.parse_payload(issue_payload).project

        assert project == Project(name="Diaspora", url="http://example.com/mike/diaspora")


class TestPushDecoding:
    def test_decode_push(self, provider, push_payload) -> None:
        event = provider.parse_payload(push_payload)

        assert isinstance(event, PushEvent)
        assert event.actor == "jsmith"
        assert event.branch == "master"
        assert event.project.id == 15
        assert event.project.path == "mike/diaspora"
        assert event.total_commits_count == 2
        assert event.raw is push_payload
        assert event.commits[0] == Commit(
            id="b6568db1bc1dcd7f8b4d5a946b0b91f9dacd7327",
            message="Update Catalan translation to e38cb41.\n\nSee merge request !1",
            url="http://example.com/mike/diaspora/commit/b6568db1bc1dcd7f8b4d5a946b0b91f9dacd7327",
            author_name="Jordi Mallach",
        )
        assert event.commits[0].title == "Update Catalan translation to e38cb41."
        assert event.commits[0].short_id == "b6568db1"

    def test_new_and_removed_branch(self, provider, push_payload) -> None:
        push_payload["before"] = BLANK_SHA
        assert provider.parse_payload(push_payload).is_new_branch

        push_payload["before"] = "95790bf891e76fee5e1747ab589903a6a1f80f22"
        push_payload["after"] = BLANK_SHA
        assert provider.parse_payload(push_payload).is_removed_branch

    def test_commit_without_author(self, provider, push_payload) -> None:
        del push_payload["commits"][0]["author"]

        with pytest.raises(ValidationError) as excinfo:
            provider.parse_payload(push_payload)

        assert excinfo.value.field == "commits[0].author"

    def test_missing_ref(self, provider, push_payload) -> None:
        del push_payload["ref"]

        with pytest.raises(ValidationError, match="ref"):
            provider.parse_payload(push_payload)

    def test_tag_push(self, provider, tag_push_payload) -> None:
        event = provider.parse_payload(tag_push_payload)

        assert event.tag == "v1.0.0"
        assert event.is_new_tag
        assert not event.is_removed_tag


class TestNoteDecoding:
    def test_commit_note(self, provider, note_payload) -> None:
        event = provider.parse_payload(note_payload)

        assert event.noteable_type is NoteableType.COMMIT
        assert event.target_ref == "cfe32cf61b73a0d5e9f13e774abde7ff789b1660"
        assert event.target_title == "Add submodule"

    def test_unknown_noteable_type(self, provider, note_payload) -> None:
        note_payload["object_attributes"]["noteable_type"] = "Epic"

        with pytest.raises(ValidationError, match="Unsupported noteable type"):
            provider.parse_payload(note_payload)

    def test_missing_target(self, provider, note_payload) -> None:
        del note_payload["commit"]

        with pytest.raises(ValidationError, match="commit"):
            provider.parse_payload(note_payload)


class TestPipelineDecoding:
    def test_decode_pipeline(self, provider, pipeline_payload) -> None:
        event = provider.parse_payload(pipeline_payload)

        assert isinstance(event, PipelineEvent)
        assert event.pipeline_id == 31
        assert event.ref_type == "branch"
        assert event.duration == 63

    def test_missing_duration_defaults_to_zero(self, provider, pipeline_payload) -> None:
        pipeline_payload["object_attributes"]["duration"] = None

        assert provider.parse_payload(pipeline_payload).duration == 0

    def test_tag_must_be_boolean(self, provider, pipeline_payload) -> None:
        pipeline_payload["object_attributes"]["tag"] = "yes"

        with pytest.raises(ValidationError, match="must be a boolean"):
            provider.parse_payload(pipeline_payload)
