"""Tests for the emails-on-push worker."""

import pytest
from django.core import mail

from webhooks.domain_models import BLANK_SHA
from webhooks.exceptions import ValidationError
from webhooks.services.job_queue import JobQueue
from webhooks.services.push_email import (
    EmailsOnPushWorker,
    build_body,
    build_subject,
    parse_recipients,
)


class TestParseRecipients:
    def test_whitespace_separated(self) -> None:
        assert parse_recipients("a@example.com  b@example.com\nc@example.com") == [
            "a@example.com",
            "b@example.com",
            "c@example.com",
        ]

    def test_duplicates_removed(self) -> None:
        assert parse_recipients(["a@example.com", "a@example.com "]) == ["a@example.com"]

    def test_empty(self) -> None:
        assert parse_recipients(None) == []
        assert parse_recipients("   ") == []


class TestSubject:
    """Test the email subject for each kind of push"""

    def test_several_commits(self, provider, push_payload) -> None:
        event = provider.parse_payload(push_payload)

        assert build_subject(event) == (
            "[Git][mike/diaspora][master] 2 commits: Update Catalan translation to e38cb41."
        )

    def test_single_commit(self, provider, push_payload) -> None:
        push_payload["commits"] = push_payload["commits"][1:]

        event = provider.parse_payload(push_payload)

        assert build_subject(event) == "[Git][mike/diaspora][master] fixed readme"

    def test_no_commits(self, provider, push_payload) -> None:
        push_payload["commits"] = []

        event = provider.parse_payload(push_payload)

        assert build_subject(event) == "[Git][mike/diaspora][master] No new commits"

    def test_new_branch(self, provider, push_payload) -> None:
        push_payload["before"] = BLANK_SHA

        event = provider.parse_payload(push_payload)

        assert build_subject(event) == "[Git][mike/diaspora] Pushed new branch master"

    def test_deleted_branch(self, provider, push_payload) -> None:
        push_payload["after"] = BLANK_SHA

        event = provider.parse_payload(push_payload)

        assert build_subject(event) == "[Git][mike/diaspora] Deleted branch master"


class TestBody:
    def test_body_lists_commits(self, provider, push_payload) -> None:
        body = build_body(provider.parse_payload(push_payload))

        assert body.startswith("jsmith pushed to master at mike/diaspora\n")
        assert "b6568db1bc1dcd7f8b4d5a946b0b91f9dacd7327 by Jordi Mallach" in body
        assert "    See merge request !1" in body
        assert (
            "Compare changes: http://example.com/mike/diaspora/compare/95790bf8...da156088"
            in body
        )
        assert body.endswith("Project: http://example.com/mike/diaspora\n")

    def test_hidden_commits(self, provider, push_payload) -> None:
        push_payload["total_commits_count"] = 5

        body = build_body(provider.parse_payload(push_payload))

        assert "...and 3 more commits" in body

    def test_deleted_branch(self, provider, push_payload) -> None:
        push_payload["after"] = BLANK_SHA

        body = build_body(provider.parse_payload(push_payload))

        assert body == "jsmith deleted branch master at mike/diaspora\n"


class TestEmailsOnPushWorker:
    """Test sending through Django's mail API"""

    def test_perform_sends_email(self, push_payload) -> None:
        sent = EmailsOnPushWorker().perform(
            15, "dev@example.com ops@example.com", push_payload
        )

        assert sent == 1
        assert len(mail.outbox) == 1
        email = mail.outbox[0]
        assert email.subject.startswith("[Git][mike/diaspora][master]")
        assert email.to == ["dev@example.com", "ops@example.com"]
        assert email.from_email == "gitnotify@example.com"

    def test_no_recipients(self, push_payload) -> None:
        assert EmailsOnPushWorker().perform(15, "", push_payload) == 0
        assert mail.outbox == []

    def test_invalid_payload(self, push_payload) -> None:
        del push_payload["ref"]

        with pytest.raises(ValidationError):
            EmailsOnPushWorker().perform(15, ["dev@example.com"], push_payload)

    def test_perform_async(self, push_payload) -> None:
        EmailsOnPushWorker.perform_async(
            15, ["dev@example.com"], push_payload, queue=JobQueue(eager=True)
        )

        assert len(mail.outbox) == 1
