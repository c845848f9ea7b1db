import pytest
from pydantic import ValidationError

from conftest import issue_comment_payload, pr_comment_payload, review_payload
from mention_notifier.core.exceptions import MalformedInputError
from mention_notifier.models import IssueCommentEvent, PullRequestCommentEvent, PullRequestReviewEvent
from mention_notifier.orchestration.classifier import classify_event


def test_issue_comment():
    event = classify_event(issue_comment_payload())
    assert isinstance(event, IssueCommentEvent)
    assert (event.owner, event.repo, event.number) == ("acme", "widgets", 12)
    assert event.thread_author == "issue-author"
    assert event.sender == "octocat"
    assert event.is_pull_request is False


def test_issue_comment_on_pull_request_conversation():
    payload = issue_comment_payload()
    payload["issue"]["pull_request"] = {"url": "https://api.github.com/repos/acme/widgets/pulls/12"}
    event = classify_event(payload)
    assert isinstance(event, IssueCommentEvent)
    assert event.is_pull_request is True


def test_pull_request_comment():
    event = classify_event(pr_comment_payload(body="hey @alice"))
    assert isinstance(event, PullRequestCommentEvent)
    assert event.body == "hey @alice"
    assert event.thread_url == "https://github.com/acme/widgets/pull/7"
    assert event.repo_url == "https://github.com/acme/widgets"


def test_review():
    event = classify_event(review_payload(body="nice", state="changes_requested"))
    assert isinstance(event, PullRequestReviewEvent)
    assert event.review_state == "changes_requested"
    assert event.sender == "reviewer"


def test_issue_shape_takes_precedence():
    payload = issue_comment_payload()
    payload["pull_request"] = pr_comment_payload()["pull_request"]
    assert isinstance(classify_event(payload), IssueCommentEvent)


def test_comment_shape_takes_precedence_over_review():
    payload = pr_comment_payload()
    payload["review"] = review_payload()["review"]
    assert isinstance(classify_event(payload), PullRequestCommentEvent)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        None,
        [],
        {"action": "opened", "pull_request": {"number": 1}},
        {"review": {"body": "x"}},
        {"comment": "not an object", "issue": {"number": 1}},
        {"ref": "refs/heads/main", "commits": []},
    ],
)
def test_unmatched_shapes_are_silently_ignored(payload):
    assert classify_event(payload) is None


def test_repo_owner_falls_back_to_organization():
    payload = pr_comment_payload()
    del payload["repository"]
    payload["organization"] = {"login": "acme-org"}
    event = classify_event(payload)
    assert event.owner == "acme-org"
    assert event.repo == "widgets"


def test_links_fallback_for_html_url():
    payload = pr_comment_payload()
    del payload["pull_request"]["html_url"]
    payload["pull_request"]["_links"] = {"html": {"href": "https://github.com/acme/widgets/pull/7"}}
    assert classify_event(payload).thread_url == "https://github.com/acme/widgets/pull/7"


def test_matched_shape_missing_fields_is_malformed():
    payload = pr_comment_payload()
    del payload["comment"]["user"]
    del payload["pull_request"]["number"]
    with pytest.raises(MalformedInputError) as excinfo:
        classify_event(payload)
    assert set(excinfo.value.details["fields"]) == {"sender", "number"}


def test_event_is_immutable():
    event = classify_event(pr_comment_payload())
    with pytest.raises(ValidationError):
        event.body = "changed"
