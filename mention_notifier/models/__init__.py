from .event import (
    IssueCommentEvent,
    NotificationEvent,
    PullRequestCommentEvent,
    PullRequestReviewEvent,
    ThreadEvent,
)
from .notification import DeliveryReceipt, Recipient, RecipientReason

__all__ = [
    "DeliveryReceipt",
    "IssueCommentEvent",
    "NotificationEvent",
    "PullRequestCommentEvent",
    "PullRequestReviewEvent",
    "Recipient",
    "RecipientReason",
    "ThreadEvent",
]
