import os
from typing import Self

from pydantic import BaseModel, Field

from lovable_mcp.clients.github import DEFAULT_MAX_CONCURRENT_REQUESTS, DEFAULT_TIMEOUT_SECONDS, get_github_token

DEFAULT_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = 3000
DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS = 3600.0
DEFAULT_KEEPALIVE_INTERVAL_SECONDS = 15.0


def get_github_owner() -> str:
    if owner := os.environ.get("GITHUB_OWNER"):
        return owner
    msg = "GITHUB_OWNER must be set"
    raise ValueError(msg)


class ServerSettings(BaseModel):
    """Startup configuration for the server."""

    github_token: str = Field(repr=False, min_length=1)
    github_owner: str = Field(min_length=1)

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    upstream_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_concurrent_upstream_requests: int = Field(default=DEFAULT_MAX_CONCURRENT_REQUESTS, ge=1)
    session_idle_timeout_seconds: float = Field(default=DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS, gt=0)
    keepalive_interval_seconds: float = Field(default=DEFAULT_KEEPALIVE_INTERVAL_SECONDS, gt=0)

    @classmethod
    def from_env(cls, **overrides: object) -> Self:
        """Read settings from the environment. Keyword overrides that are not None take precedence.

        Raises:
            ValueError: If the token or the owner is not configured.
        """

        values: dict[str, object] = {
            "github_token": overrides.pop("github_token", None) or get_github_token(),
            "github_owner": overrides.pop("github_owner", None) or get_github_owner(),
            "host": os.environ.get("HOST"),
            "port": os.environ.get("PORT"),
            "upstream_timeout_seconds": os.environ.get("UPSTREAM_TIMEOUT_SECONDS"),
            "max_concurrent_upstream_requests": os.environ.get("MAX_CONCURRENT_UPSTREAM_REQUESTS"),
            "session_idle_timeout_seconds": os.environ.get("SESSION_IDLE_TIMEOUT_SECONDS"),
            "keepalive_interval_seconds": os.environ.get("KEEPALIVE_INTERVAL_SECONDS"),
        }

        values.update({key: value for key, value in overrides.items() if value is not None})

        return cls.model_validate({key: value for key, value in values.items() if value not in (None, "")})
