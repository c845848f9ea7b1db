"""Slack Block Kit builders for comment notifications."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional

from slackify_markdown import slackify_markdown

from mention_notifier.models import PullRequestReviewEvent, RecipientReason, ThreadEvent

# Slack rejects section text longer than this.
MAX_SECTION_CHARS = 3000

ZERO_WIDTH_JOINER = "\u200d"
_ADJACENT_BACKTICK_RE = re.compile(r"`(?=`)")

_REVIEW_VERBS = {
    "approved": "approved",
    "changes_requested": "requested changes on",
    "commented": "reviewed",
}


def _thread_label(event: ThreadEvent) -> str:
    kind = "pull request" if event.is_pull_request else "issue"
    return f"{kind} #{event.number}"


def _action(event: ThreadEvent, reason: RecipientReason) -> str:
    is_review = isinstance(event, PullRequestReviewEvent)
    if reason == RecipientReason.AUTHOR:
        if is_review:
            verb = _REVIEW_VERBS.get((event.review_state or "").lower(), "reviewed")
            return f"{verb} your"
        return "commented on your"
    return "mentioned you in a review on" if is_review else "mentioned you on"


def build_header_text(
    event: ThreadEvent,
    reason: RecipientReason,
    *,
    sender_id: Optional[str] = None,
) -> str:
    sender = f"<@{sender_id}>" if sender_id else f"*<{event.sender_url}|@{event.sender}>*"
    text = f"{sender} {_action(event, reason)} *<{event.thread_url}|{_thread_label(event)}>*"
    if event.is_pull_request:
        text += f" for _<{event.repo_url}|{event.full_repo}>_"
    if event.source_url:
        text += f" (<{event.source_url}|view>)"
    return text


def _break_fences(text: str) -> str:
    # No two backticks may touch, or an inner ``` would close the outer block.
    return _ADJACENT_BACKTICK_RE.sub("`" + ZERO_WIDTH_JOINER, text)


def build_body_text(body: str, convert: Callable[[str], str] = slackify_markdown) -> str:
    converted = _break_fences(convert(body).strip()) if body else ""
    limit = MAX_SECTION_CHARS - len("```\n\n```") - 1
    if len(converted) > limit:
        converted = converted[: limit - 1] + "…"
    return f"```\n{converted}\n```"


def build_comment_blocks(
    event: ThreadEvent,
    reason: RecipientReason = RecipientReason.MENTION,
    *,
    convert: Callable[[str], str] = slackify_markdown,
    sender_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Header section, divider, preformatted body, divider.

    `sender_id`, when given, names the commenter as a Slack mention instead of
    a link to their GitHub profile.
    """

    header = build_header_text(event, reason, sender_id=sender_id)
    return [
        {"type": "section", "text": {"type": "mrkdwn", "text": header}},
        {"type": "divider"},
        {"type": "section", "text": {"type": "mrkdwn", "text": build_body_text(event.body or "", convert)}},
        {"type": "divider"},
    ]


def fallback_text(event: ThreadEvent, reason: RecipientReason = RecipientReason.MENTION) -> str:
    """Plain-text summary used for push notifications."""

    return f"@{event.sender} {_action(event, reason)} {event.full_repo}#{event.number}"
