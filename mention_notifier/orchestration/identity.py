"""GitHub handle -> Slack user resolution."""

from __future__ import annotations

import logging
from typing import Protocol

from mention_notifier.core.config import UserMap
from mention_notifier.core.exceptions import UnknownRecipientError

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    async def lookup_user_id(self, email: str) -> str:
        ...


def lookup_email(user_map: UserMap, handle: str) -> str:
    """Return the mapped email for `handle`, matching GitHub's case-insensitive logins."""

    email = (user_map.get(handle.casefold()) or "").strip()
    if not email:
        raise UnknownRecipientError(
            error_code="UNKNOWN_RECIPIENT",
            message=f"GitHub user @{handle} has no email in the user map.",
            details={"handle": handle},
        )
    return email


class IdentityResolver:
    """Maps handles to emails with the configured table, then emails to Slack ids."""

    def __init__(self, user_map: UserMap, directory: UserDirectory) -> None:
        self.user_map = {handle.casefold(): email for handle, email in user_map.items()}
        self.directory = directory

    def email_for(self, handle: str) -> str:
        return lookup_email(self.user_map, handle)

    async def resolve(self, handle: str) -> str:
        email = self.email_for(handle)
        user_id = await self.directory.lookup_user_id(email)
        logger.debug("Resolved @%s to Slack user %s", handle, user_id)
        return user_id
