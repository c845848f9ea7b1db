"""
Configuration management for the mention notifier.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. Every field accepts both the GitHub Actions input variable
(`INPUT_<NAME>`) and a plain environment variable so the same settings work
inside a workflow step and from a shell.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import AliasChoices, Field, PositiveFloat, ValidationError, field_validator
from pydantic_settings import BaseSettings

from mention_notifier.core.exceptions import MalformedInputError

UserMap = Mapping[str, str]


class Settings(BaseSettings):
    """Run configuration sourced from environment variables."""

    # Credentials
    GITHUB_TOKEN: Optional[str] = Field(None, validation_alias=AliasChoices("INPUT_GITHUBTOKEN", "GITHUB_TOKEN"))
    SLACK_BOT_TOKEN: Optional[str] = Field(None, validation_alias=AliasChoices("INPUT_SLACKTOKEN", "SLACK_BOT_TOKEN"))
    SLACK_SIGNING_SECRET: Optional[str] = Field(
        None, validation_alias=AliasChoices("INPUT_SLACKSIGNINGSECRET", "SLACK_SIGNING_SECRET")
    )

    # Handle -> email table, as a JSON object
    USER_MAP: str = Field("{}", validation_alias=AliasChoices("INPUT_USERMAP", "USER_MAP"))

    # Behaviour
    NOTIFY_AUTHOR: bool = Field(False, validation_alias=AliasChoices("INPUT_NOTIFYAUTHOR", "NOTIFY_AUTHOR"))
    SLACK_MENTION_SENDER: bool = Field(
        False, validation_alias=AliasChoices("INPUT_SLACKMENTIONSENDER", "SLACK_MENTION_SENDER")
    )

    # GitHub runtime
    GITHUB_API_URL: str = Field("https://api.github.com", validation_alias="GITHUB_API_URL")
    GITHUB_EVENT_PATH: Optional[Path] = Field(None, validation_alias="GITHUB_EVENT_PATH")

    # Tuning
    HTTP_TIMEOUT_SECONDS: PositiveFloat = Field(30, validation_alias="HTTP_TIMEOUT_SECONDS")
    LOG_LEVEL: str = Field("INFO", validation_alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @field_validator("GITHUB_TOKEN", "SLACK_BOT_TOKEN", "SLACK_SIGNING_SECRET", mode="before")
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        # Unset action inputs arrive as empty strings.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("NOTIFY_AUTHOR", "SLACK_MENTION_SENDER", mode="before")
    def _blank_to_false(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return False
        return value

    @field_validator("LOG_LEVEL")
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def load_user_map(self) -> UserMap:
        """Parse `USER_MAP` into a read-only handle -> email mapping."""

        return parse_user_map(self.USER_MAP)


def parse_user_map(raw: str) -> UserMap:
    try:
        data = json.loads(raw or "{}")
    except json.JSONDecodeError as exc:
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message=f"User map is not valid JSON: {exc.msg}",
        ) from exc

    if not isinstance(data, dict):
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message="User map must be a JSON object of handle -> email.",
        )

    bad = sorted(handle for handle, email in data.items() if not isinstance(email, str))
    if bad:
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message="User map values must be email strings.",
            details={"handles": bad},
        )

    # GitHub logins are case-insensitive, so keys are stored casefolded.
    normalized: dict[str, str] = {}
    collisions: set[str] = set()
    for handle, email in data.items():
        key = handle.casefold()
        if key in normalized:
            collisions.add(key)
        normalized[key] = email
    if collisions:
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message="User map lists the same GitHub user more than once with different casing.",
            details={"handles": sorted(collisions)},
        )

    return MappingProxyType(normalized)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    try:
        return Settings()
    except ValidationError as exc:
        raise MalformedInputError(
            error_code="MALFORMED_INPUT",
            message=f"Invalid configuration: {exc.error_count()} field(s) failed validation.",
            details={"errors": [err["loc"] for err in exc.errors()]},
        ) from exc
