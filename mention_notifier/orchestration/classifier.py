"""Turn a raw GitHub webhook payload into one of the supported event variants."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type

from pydantic import ValidationError

from mention_notifier.core.exceptions import MalformedInputError
from mention_notifier.models import (
    IssueCommentEvent,
    NotificationEvent,
    PullRequestCommentEvent,
    PullRequestReviewEvent,
    ThreadEvent,
)

logger = logging.getLogger(__name__)


def _dig(payload: Any, *path: str) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _has(payload: Dict[str, Any], key: str) -> bool:
    return isinstance(payload.get(key), dict)


def _repository(payload: Dict[str, Any]) -> Dict[str, Any]:
    owner = _dig(payload, "repository", "owner", "login") or _dig(payload, "organization", "login")
    repo = _dig(payload, "repository", "name") or _dig(payload, "pull_request", "base", "repo", "name")
    return {"owner": owner, "repo": repo}


def _html_url(node: Any) -> Optional[str]:
    return _dig(node, "html_url") or _dig(node, "_links", "html", "href")


def _issue_comment(payload: Dict[str, Any]) -> Dict[str, Any]:
    issue = payload["issue"]
    comment = payload["comment"]
    return {
        **_repository(payload),
        "number": issue.get("number"),
        "thread_url": _html_url(issue),
        "thread_author": _dig(issue, "user", "login"),
        "on_pull_request": "pull_request" in issue,
        "body": comment.get("body"),
        "sender": _dig(comment, "user", "login"),
        "source_url": _html_url(comment),
    }


def _pull_request_comment(payload: Dict[str, Any]) -> Dict[str, Any]:
    pull_request = payload["pull_request"]
    comment = payload["comment"]
    return {
        **_repository(payload),
        "number": pull_request.get("number"),
        "thread_url": _html_url(pull_request),
        "thread_author": _dig(pull_request, "user", "login"),
        "body": comment.get("body"),
        "sender": _dig(comment, "user", "login"),
        "source_url": _html_url(comment),
    }


def _pull_request_review(payload: Dict[str, Any]) -> Dict[str, Any]:
    pull_request = payload["pull_request"]
    review = payload["review"]
    return {
        **_repository(payload),
        "number": pull_request.get("number"),
        "thread_url": _html_url(pull_request),
        "thread_author": _dig(pull_request, "user", "login"),
        "body": review.get("body"),
        "sender": _dig(review, "user", "login"),
        "source_url": _html_url(review),
        "review_state": review.get("state"),
    }


# Checked in order; the first matching shape wins.
_SHAPES: Tuple[Tuple[Tuple[str, str], Type[ThreadEvent], Callable[[Dict[str, Any]], Dict[str, Any]]], ...] = (
    (("comment", "issue"), IssueCommentEvent, _issue_comment),
    (("comment", "pull_request"), PullRequestCommentEvent, _pull_request_comment),
    (("review", "pull_request"), PullRequestReviewEvent, _pull_request_review),
)


def classify_event(payload: Any) -> Optional[NotificationEvent]:
    """Return the event variant for `payload`, or None when no shape matches.

    A payload that matches a shape but lacks one of its required fields raises
    `MalformedInputError`; an unrecognised payload is not an error.
    """

    if not isinstance(payload, dict):
        return None

    for keys, model, extract in _SHAPES:
        if not all(_has(payload, key) for key in keys):
            continue
        fields = extract(payload)
        try:
            event = model.model_validate(fields)
        except ValidationError as exc:
            missing = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
            raise MalformedInputError(
                error_code="MALFORMED_INPUT",
                message=f"Event payload looks like {model.__name__} but is missing required fields.",
                details={"fields": missing},
            ) from exc
        logger.info(
            "event.classified",
            extra={"kind": event.kind, "repo": event.full_repo, "number": event.number},
        )
        return event

    logger.debug("Payload keys %s match no supported event shape", sorted(payload))
    return None
