from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RecipientReason(str, Enum):
    MENTION = "mention"
    AUTHOR = "author"


class Recipient(BaseModel):
    model_config = ConfigDict(frozen=True)

    handle: str
    reason: RecipientReason = RecipientReason.MENTION


class DeliveryReceipt(BaseModel):
    """What Slack acknowledged for one direct message."""

    handle: str
    user_id: str
    channel: str
    ts: Optional[str] = None
