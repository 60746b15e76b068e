from typing import Any, Dict

import pytest
from django.test.client import RequestFactory

from webhooks.domain_models import BLANK_SHA
from webhooks.providers.gitlab import GitLabProvider

PROJECT = {
    "id": 15,
    "name": "Diaspora",
    "web_url": "http://example.com/mike/diaspora",
    "path_with_namespace": "mike/diaspora",
}


@pytest.fixture
def provider() -> GitLabProvider:
    """GitLab provider with the test token"""
    return GitLabProvider("test-gitlab-token")


@pytest.fixture
def request_factory():
    """Django RequestFactory for mocking requests"""
    return RequestFactory()


@pytest.fixture
def issue_payload() -> Dict[str, Any]:
    """Issue hook payload with flat project fields"""
    return {
        "object_kind": "issue",
        "user": {"username": "username"},
        "project_name": "project_name",
        "project_url": "somewhere.com",
        "object_attributes": {
            "title": "Issue title",
            "id": 10,
            "iid": 100,
            "assignee_id": 1,
            "url": "url",
            "action": "open",
            "state": "opened",
            "description": "issue description",
        },
    }


@pytest.fixture
def merge_request_payload() -> Dict[str, Any]:
    return {
        "object_kind": "merge_request",
        "user": {"name": "Administrator", "username": "root"},
        "project": dict(PROJECT),
        "object_attributes": {
            "id": 99,
            "iid": 1,
            "title": "MS-Viewport",
            "url": "http://example.com/mike/diaspora/merge_requests/1",
            "action": "open",
            "state": "opened",
            "description": "Fixes the viewport",
            "source_branch": "ms-viewport",
            "target_branch": "master",
        },
    }


@pytest.fixture
def push_payload() -> Dict[str, Any]:
    """Push hook payload with two commits"""
    return {
        "object_kind": "push",
        "before": "95790bf891e76fee5e1747ab589903a6a1f80f22",
        "after": "da1560886d4f094c3e6c9ef40349f7d38b5d27d7",
        "ref": "refs/heads/master",
        "user_name": "John Smith",
        "user_username": "jsmith",
        "project_id": 15,
        "project": dict(PROJECT),
        "commits": [
            {
                "id": "b6568db1bc1dcd7f8b4d5a946b0b91f9dacd7327",
                "message": "Update Catalan translation to e38cb41.\n\nSee merge request !1",
                "url": "http://example.com/mike/diaspora/commit/b6568db1bc1dcd7f8b4d5a946b0b91f9dacd7327",
                "author": {"name": "Jordi Mallach", "email": "jordi@softcatala.org"},
            },
            {
                "id": "da1560886d4f094c3e6c9ef40349f7d38b5d27d7",
                "message": "fixed readme",
                "url": "http://example.com/mike/diaspora/commit/da1560886d4f094c3e6c9ef40349f7d38b5d27d7",
                "author": {"name": "GitLab dev user", "email": "gitlabdev@example.com"},
            },
        ],
        "total_commits_count": 2,
    }


@pytest.fixture
def tag_push_payload() -> Dict[str, Any]:
    return {
        "object_kind": "tag_push",
        "before": BLANK_SHA,
        "after": "82b3d5ae55f7080f1e6022629cdb57bfae7cccc7",
        "ref": "refs/tags/v1.0.0",
        "user_name": "John Smith",
        "user_username": "jsmith",
        "project_id": 15,
        "project": dict(PROJECT),
    }


@pytest.fixture
def note_payload() -> Dict[str, Any]:
    """Note hook payload for a comment on a commit"""
    return {
        "object_kind": "note",
        "user": {"name": "Administrator", "username": "root"},
        "project_id": 15,
        "project": dict(PROJECT),
        "object_attributes": {
            "id": 1243,
            "note": "Is this [snippet](http://example.com/snippets/53) relevant?",
            "noteable_type": "Commit",
            "url": "http://example.com/mike/diaspora/commit/cfe32cf6#note_1243",
        },
        "commit": {
            "id": "cfe32cf61b73a0d5e9f13e774abde7ff789b1660",
            "message": "Add submodule\n\nSigned-off-by: Example User <user@example.com>",
        },
    }


@pytest.fixture
def pipeline_payload() -> Dict[str, Any]:
    return {
        "object_kind": "pipeline",
        "user": {"name": "Administrator", "username": "root"},
        "project": dict(PROJECT),
        "object_attributes": {
            "id": 31,
            "ref": "master",
            "tag": False,
            "status": "success",
            "duration": 63,
        },
    }
