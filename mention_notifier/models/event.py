from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ThreadEvent(BaseModel):
    """Fields shared by every event that can trigger a notification."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    number: int
    thread_url: str
    thread_author: Optional[str] = None
    body: Optional[str] = None
    sender: str
    source_url: Optional[str] = None

    @property
    def full_repo(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def host_url(self) -> str:
        # Derived from the thread url so GitHub Enterprise hosts keep working.
        prefix, sep, _ = self.thread_url.partition(f"/{self.owner}/{self.repo}/")
        return prefix if sep else "https://github.com"

    @property
    def repo_url(self) -> str:
        return f"{self.host_url}/{self.owner}/{self.repo}"

    @property
    def sender_url(self) -> str:
        return f"{self.host_url}/{self.sender}"

    @property
    def is_pull_request(self) -> bool:
        return True


class IssueCommentEvent(ThreadEvent):
    kind: Literal["issue_comment"] = "issue_comment"
    on_pull_request: bool = False

    @property
    def is_pull_request(self) -> bool:
        return self.on_pull_request


class PullRequestCommentEvent(ThreadEvent):
    kind: Literal["pull_request_comment"] = "pull_request_comment"


class PullRequestReviewEvent(ThreadEvent):
    kind: Literal["pull_request_review"] = "pull_request_review"
    review_state: Optional[str] = None


NotificationEvent = Annotated[
    Union[IssueCommentEvent, PullRequestCommentEvent, PullRequestReviewEvent],
    Field(discriminator="kind"),
]
