"""Command line entry for the mention notifier.

Usage:
    mention-notifier [--event PATH] [--dry-run]

Inside a GitHub Actions step the event payload path and the action inputs are
picked up from the environment, so no arguments are needed.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from mention_notifier.core.config import Settings, get_settings
from mention_notifier.core.exceptions import MalformedInputError, NotifierError
from mention_notifier.integrations.github import GitHubClient
from mention_notifier.integrations.slack.blocks import build_comment_blocks
from mention_notifier.integrations.slack.bot import SlackNotifier
from mention_notifier.orchestration.classifier import classify_event
from mention_notifier.orchestration.identity import IdentityResolver, lookup_email
from mention_notifier.orchestration.router import NotificationRouter, plan_recipients

logger = logging.getLogger("mention_notifier")


def load_event(path: Optional[Path]) -> Any:
    if path is None:
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message="No event payload: pass --event or set GITHUB_EVENT_PATH.",
        )
    try:
        with path.open("r", encoding="utf-8") as fp:
            return json.load(fp)
    except OSError as exc:
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message=f"Cannot read event payload {path}: {exc.strerror}",
        ) from exc
    except json.JSONDecodeError as exc:
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message=f"Event payload {path} is not valid JSON: {exc.msg}",
        ) from exc


def _require(value: Optional[str], name: str) -> str:
    if not value:
        raise MalformedInputError(error_code="MALFORMED_INPUT", message=f"{name} is not configured.")
    return value


async def preview(payload: Any, settings: Settings) -> None:
    event = classify_event(payload)
    if event is None:
        logger.info("Dry run: payload matches no comment or review shape.")
        return

    # No Slack or GitHub calls: the author comes from the payload or is skipped.
    user_map = settings.load_user_map()
    recipients = plan_recipients(event, notify_author=settings.NOTIFY_AUTHOR, author=event.thread_author)
    for recipient in recipients:
        blocks = build_comment_blocks(event, recipient.reason)
        logger.info(
            "Dry run: would notify @%s <%s> (%s)\n%s",
            recipient.handle,
            lookup_email(user_map, recipient.handle),
            recipient.reason.value,
            json.dumps(blocks, indent=2, ensure_ascii=False),
        )


async def notify(payload: Any, settings: Settings) -> int:
    user_map = settings.load_user_map()
    slack = SlackNotifier(
        _require(settings.SLACK_BOT_TOKEN, "Slack bot token"),
        _require(settings.SLACK_SIGNING_SECRET, "Slack signing secret"),
    )

    async with GitHubClient(
        settings.GITHUB_TOKEN,
        base_url=settings.GITHUB_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    ) as github:
        router = NotificationRouter(
            IdentityResolver(user_map, slack),
            slack,
            github=github,
            notify_author=settings.NOTIFY_AUTHOR,
            mention_sender=settings.SLACK_MENTION_SENDER,
        )
        receipts = await router.handle(payload)

    logger.info("Sent %d notification(s).", len(receipts))
    return len(receipts)


def report_failure(message: str) -> None:
    """Surface the failure reason as a GitHub Actions error annotation."""

    print(f"::error::{message}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mention-notifier",
        description="DM Slack users mentioned in a GitHub comment or review",
    )
    parser.add_argument(
        "--event",
        type=Path,
        default=None,
        help="Path to the webhook event JSON (default: $GITHUB_EVENT_PATH)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the messages that would be sent without calling Slack or GitHub",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = get_settings()
        logging.getLogger().setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        payload = load_event(args.event or settings.GITHUB_EVENT_PATH)
        if args.dry_run:
            asyncio.run(preview(payload, settings))
        else:
            asyncio.run(notify(payload, settings))
    except NotifierError as exc:
        logger.error("Notification failed: %s", exc)
        report_failure(exc.message)
        sys.exit(1)
    except Exception as exc:
        logger.exception("Unexpected failure: %s", exc)
        report_failure(str(exc) or exc.__class__.__name__)
        sys.exit(1)


if __name__ == "__main__":
    main()
