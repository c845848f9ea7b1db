import copy

import pytest

from mention_notifier.core.config import get_settings
from mention_notifier.core.exceptions import UnknownRecipientError

REPOSITORY = {"name": "widgets", "owner": {"login": "acme"}}

PULL_REQUEST = {
    "number": 7,
    "html_url": "https://github.com/acme/widgets/pull/7",
    "user": {"login": "pr-author"},
    "base": {"repo": {"name": "widgets"}},
}

ISSUE = {
    "number": 12,
    "html_url": "https://github.com/acme/widgets/issues/12",
    "user": {"login": "issue-author"},
}


def pr_comment_payload(body="looks good @alice", sender="octocat"):
    return {
        "action": "created",
        "comment": {
            "body": body,
            "user": {"login": sender},
            "html_url": "https://github.com/acme/widgets/pull/7#discussion_r100",
        },
        "pull_request": copy.deepcopy(PULL_REQUEST),
        "repository": copy.deepcopy(REPOSITORY),
    }


def issue_comment_payload(body="ping @alice", sender="octocat"):
    return {
        "action": "created",
        "comment": {
            "body": body,
            "user": {"login": sender},
            "html_url": "https://github.com/acme/widgets/issues/12#issuecomment-5",
        },
        "issue": copy.deepcopy(ISSUE),
        "repository": copy.deepcopy(REPOSITORY),
    }


def review_payload(body=None, sender="reviewer", state="approved"):
    return {
        "action": "submitted",
        "review": {
            "body": body,
            "state": state,
            "user": {"login": sender},
            "html_url": "https://github.com/acme/widgets/pull/7#pullrequestreview-9",
        },
        "pull_request": copy.deepcopy(PULL_REQUEST),
        "repository": copy.deepcopy(REPOSITORY),
    }


class FakeSlack:
    """Records Slack calls; emails missing from `directory` are unknown users."""

    def __init__(self, directory=None, fail_post_for=None):
        self.directory = directory or {}
        self.fail_post_for = fail_post_for
        self.lookups = []
        self.posts = []

    async def lookup_user_id(self, email):
        self.lookups.append(email)
        if email not in self.directory:
            raise UnknownRecipientError(error_code="UNKNOWN_RECIPIENT", message=f"No Slack account found for {email}.")
        return self.directory[email]

    async def post_direct_message(self, user_id, blocks, *, text):
        if user_id == self.fail_post_for:
            raise RuntimeError("slack down")
        self.posts.append({"channel": user_id, "blocks": blocks, "text": text})
        return {"ok": True, "channel": f"D{user_id}", "ts": f"{len(self.posts)}.000"}


class FakeGitHub:
    def __init__(self, author="pr-author"):
        self.author = author
        self.calls = []

    async def thread_author(self, event):
        self.calls.append((event.full_repo, event.number))
        return self.author


USER_MAP = {
    "alice": "alice@acme.test",
    "bob-2": "bob@acme.test",
    "carol_x": "carol@acme.test",
    "pr-author": "author@acme.test",
}

DIRECTORY = {
    "alice@acme.test": "U_ALICE",
    "bob@acme.test": "U_BOB",
    "carol@acme.test": "U_CAROL",
    "author@acme.test": "U_AUTHOR",
}


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def slack():
    return FakeSlack(dict(DIRECTORY))


@pytest.fixture
def github():
    return FakeGitHub()
