"""Async Slack client wrapper for delivering direct messages."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import aiohttp
from slack_bolt.async_app import AsyncApp
from slack_sdk.errors import SlackApiError, SlackClientError

from mention_notifier.core.exceptions import RemoteCallError, UnknownRecipientError

logger = logging.getLogger(__name__)

USER_NOT_FOUND_ERRORS = frozenset({"users_not_found", "user_not_found"})


class SlackNotifier:
    """Encapsulates the Slack Bolt app and the two Web API calls the notifier makes."""

    def __init__(
        self,
        token: Optional[str] = None,
        signing_secret: Optional[str] = None,
        *,
        app: Optional[AsyncApp] = None,
    ) -> None:
        self.app = app or AsyncApp(token=token, signing_secret=signing_secret)

    @property
    def client(self):
        return self.app.client

    async def lookup_user_id(self, email: str) -> str:
        """Resolve a Slack user id from the email address on their profile."""

        try:
            response = await self.client.users_lookupByEmail(email=email)
        except SlackApiError as exc:
            error = exc.response.get("error")
            if error in USER_NOT_FOUND_ERRORS:
                raise UnknownRecipientError(
                    error_code="UNKNOWN_RECIPIENT",
                    message=f"No Slack account found for {email}.",
                ) from exc
            raise RemoteCallError(
                error_code="REMOTE_CALL_FAILED",
                message=f"Slack users.lookupByEmail failed: {error}",
            ) from exc
        except (SlackClientError, aiohttp.ClientError) as exc:
            raise RemoteCallError(
                error_code="REMOTE_CALL_FAILED",
                message=f"Slack users.lookupByEmail failed: {exc}",
            ) from exc

        return response["user"]["id"]

    async def post_direct_message(
        self,
        user_id: str,
        blocks: List[Dict[str, Any]],
        *,
        text: str,
    ) -> Dict[str, Any]:
        """Post `blocks` to the user's DM channel and return Slack's response data."""

        try:
            response = await self.client.chat_postMessage(channel=user_id, text=text, blocks=blocks)
        except SlackApiError as exc:
            raise RemoteCallError(
                error_code="REMOTE_CALL_FAILED",
                message=f"Slack chat.postMessage failed: {exc.response.get('error')}",
                details={"channel": user_id},
            ) from exc
        except (SlackClientError, aiohttp.ClientError) as exc:
            raise RemoteCallError(
                error_code="REMOTE_CALL_FAILED",
                message=f"Slack chat.postMessage failed: {exc}",
                details={"channel": user_id},
            ) from exc

        return dict(response.data) if hasattr(response, "data") else dict(response)
