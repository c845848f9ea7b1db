"""Notification router: classify an event, pick recipients, deliver direct messages."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from slackify_markdown import slackify_markdown

from mention_notifier.core.exceptions import MalformedInputError, UnknownRecipientError
from mention_notifier.integrations.github import GitHubClient
from mention_notifier.integrations.slack.blocks import build_comment_blocks, fallback_text
from mention_notifier.models import DeliveryReceipt, Recipient, RecipientReason, ThreadEvent
from mention_notifier.orchestration.classifier import classify_event
from mention_notifier.orchestration.identity import IdentityResolver
from mention_notifier.orchestration.mentions import extract_mentions

logger = logging.getLogger(__name__)


class DirectMessenger(Protocol):
    async def post_direct_message(self, user_id: str, blocks: List[Dict[str, Any]], *, text: str) -> Dict[str, Any]:
        ...


def plan_recipients(event: ThreadEvent, *, notify_author: bool = False, author: Optional[str] = None) -> List[Recipient]:
    """Mentions in body order, then the thread author when asked for.

    The author is skipped when they wrote the comment themselves.
    """

    recipients = [Recipient(handle=handle) for handle in extract_mentions(event.body) or []]
    if notify_author and author and author.casefold() != event.sender.casefold():
        recipients.append(Recipient(handle=author, reason=RecipientReason.AUTHOR))
    return recipients


class NotificationRouter:
    """Runs one event through recipient selection, resolution and delivery.

    Delivery is sequential and fail-fast: the first resolution or send error
    propagates and the remaining recipients are not attempted.
    """

    def __init__(
        self,
        resolver: IdentityResolver,
        messenger: DirectMessenger,
        *,
        github: Optional[GitHubClient] = None,
        notify_author: bool = False,
        mention_sender: bool = False,
        convert: Callable[[str], str] = slackify_markdown,
    ) -> None:
        self.resolver = resolver
        self.messenger = messenger
        self.github = github
        self.notify_author = notify_author
        self.mention_sender = mention_sender
        self.convert = convert

    async def handle(self, payload: Any) -> List[DeliveryReceipt]:
        """Classify a raw webhook payload and notify its recipients."""

        event = classify_event(payload)
        if event is None:
            logger.info("Event payload is not a comment or review; nothing to notify.")
            return []
        return await self.dispatch(event)

    async def recipients(self, event: ThreadEvent) -> List[Recipient]:
        author = await self._thread_author(event) if self.notify_author else None
        return plan_recipients(event, notify_author=self.notify_author, author=author)

    async def dispatch(self, event: ThreadEvent) -> List[DeliveryReceipt]:
        recipients = await self.recipients(event)
        if not recipients:
            logger.info("No recipients for %s#%s; nothing to send.", event.full_repo, event.number)
            return []

        sender_id = await self._sender_id(event) if self.mention_sender else None

        receipts: List[DeliveryReceipt] = []
        for recipient in recipients:
            user_id = await self.resolver.resolve(recipient.handle)
            blocks = build_comment_blocks(event, recipient.reason, convert=self.convert, sender_id=sender_id)
            data = await self.messenger.post_direct_message(
                user_id,
                blocks,
                text=fallback_text(event, recipient.reason),
            )
            receipt = DeliveryReceipt(
                handle=recipient.handle,
                user_id=user_id,
                channel=data.get("channel") or user_id,
                ts=data.get("ts"),
            )
            logger.info(
                "notification.sent",
                extra={"handle": receipt.handle, "channel": receipt.channel, "reason": recipient.reason.value},
            )
            receipts.append(receipt)

        return receipts

    async def _sender_id(self, event: ThreadEvent) -> Optional[str]:
        # An unmapped commenter is not a recipient; their header keeps the GitHub link.
        try:
            return await self.resolver.resolve(event.sender)
        except UnknownRecipientError:
            logger.info("Commenter @%s is not in the user map; linking their GitHub profile.", event.sender)
            return None

    async def _thread_author(self, event: ThreadEvent) -> Optional[str]:
        if event.thread_author:
            return event.thread_author
        if self.github is None:
            raise MalformedInputError(
                error_code="MALFORMED_INPUT",
                message="Event payload has no thread author and no GitHub client is configured.",
            )
        return await self.github.thread_author(event)
