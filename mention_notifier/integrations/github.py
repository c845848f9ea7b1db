"""GitHub REST client used to look up who opened a thread."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from mention_notifier.core.exceptions import RemoteCallError
from mention_notifier.models import ThreadEvent

logger = logging.getLogger(__name__)


class GitHubClient:
    """Thin async wrapper over the handful of GitHub endpoints the notifier needs."""

    def __init__(
        self,
        token: Optional[str],
        *,
        base_url: str = "https://api.github.com",
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/vnd.github+json", "X-GitHub-Api-Version": "2022-11-28"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_pull_request(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        return await self._get_json(f"/repos/{owner}/{repo}/pulls/{number}")

    async def get_issue(self, owner: str, repo: str, number: int) -> Dict[str, Any]:
        return await self._get_json(f"/repos/{owner}/{repo}/issues/{number}")

    async def thread_author(self, event: ThreadEvent) -> str:
        """Return the login of whoever opened the event's issue or pull request."""

        if event.thread_author:
            return event.thread_author

        if event.is_pull_request:
            data = await self.get_pull_request(event.owner, event.repo, event.number)
        else:
            data = await self.get_issue(event.owner, event.repo, event.number)

        login = (data.get("user") or {}).get("login")
        if not login:
            raise RemoteCallError(
                error_code="REMOTE_CALL_FAILED",
                message=f"GitHub returned no author for {event.full_repo}#{event.number}.",
            )
        return login

    async def _get_json(self, path: str) -> Dict[str, Any]:
        try:
            response = await self._client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteCallError(
                error_code="REMOTE_CALL_FAILED",
                message=f"GitHub API {path} returned {exc.response.status_code}.",
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteCallError(
                error_code="REMOTE_CALL_FAILED",
                message=f"GitHub API {path} request failed: {exc}",
            ) from exc

        logger.debug("GitHub GET %s -> %s", path, response.status_code)
        return response.json()
