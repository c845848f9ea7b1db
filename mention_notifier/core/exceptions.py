"""Custom exception hierarchy for the mention notifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class NotifierError(Exception):
    """Base class for run-aborting errors with structured payloads."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        base = f"[{self.error_code}] {self.message}"
        if self.details:
            return f"{base} :: {self.details}"
        return base


class UnknownRecipientError(NotifierError):
    """Raised when a handle has no mapped email or the email has no Slack account."""


class RemoteCallError(NotifierError):
    """Raised when the GitHub or Slack API call fails."""


class MalformedInputError(NotifierError):
    """Raised when configuration or the event payload cannot be interpreted."""
