"""Prometheus connection and query-scoping configuration."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# Prometheus duration, e.g. "7d", "12h", "1w2d"
_DURATION_RE = re.compile(r"^(\d+(ms|[smhdwy]))+$")
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class PrometheusConfig(BaseModel):
    """Prometheus server configuration.

    An empty ``url`` disables recommendations entirely; the report then
    shows declared resources only.

    Attributes:
        url: Prometheus server URL.
        timeout: Request timeout in seconds.
        retries: Attempts for connect/timeout failures.
        auth_type: Authentication type (none, basic, bearer).
        username: Username for basic auth.
        password: Password for basic auth.
        token: Bearer token for bearer auth.
        group_field: Extra label matched on every query (e.g. "cluster").
        group_value: Regex value for ``group_field``.
        retention: Lookback window for historical queries.
    """

    model_config = ConfigDict(extra="forbid")

    url: str = ""
    timeout: int = 30
    retries: int = 3
    auth_type: Literal["none", "basic", "bearer"] = "none"
    username: str | None = None
    password: str | None = None
    token: str | None = None
    group_field: str = ""
    group_value: str = ""
    retention: str = "7d"

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        """Validate at least one attempt is made."""
        if v < 1:
            raise ValueError("retries must be at least 1")
        return v

    @field_validator("retention")
    @classmethod
    def validate_retention(cls, v: str) -> str:
        """Validate retention is a Prometheus duration."""
        if not _DURATION_RE.match(v):
            raise ValueError(f"retention must be a Prometheus duration like '7d', got {v!r}")
        return v

    @field_validator("group_field")
    @classmethod
    def validate_group_field(cls, v: str) -> str:
        """Validate the group field is a legal label name."""
        if v and not _LABEL_NAME_RE.match(v):
            raise ValueError(f"group_field must be a valid label name, got {v!r}")
        return v

    @model_validator(mode="before")
    @classmethod
    def infer_auth_type(cls, data: object) -> object:
        """Default auth_type from whichever credentials are present."""
        if isinstance(data, dict) and "auth_type" not in data:
            if data.get("token"):
                data = {**data, "auth_type": "bearer"}
            elif data.get("username"):
                data = {**data, "auth_type": "basic"}
        return data

    @property
    def enabled(self) -> bool:
        """Whether recommendations should be fetched."""
        return bool(self.url)
