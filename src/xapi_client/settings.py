"""
xapi_client.settings

Client context model (Pydantic Settings).

Responsibilities:
- Provide a strongly-typed, env-driven snapshot of endpoint, credentials and
  behavioral options.
- Hide secrets from repr/logging (password, pre-built auth value).
- Accept the historic camelCase option names and ignore unknown options.
"""

from __future__ import annotations

import base64
import re
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class ClientContext(BaseSettings):
    """
    Immutable per-client configuration.
    A configuration change builds a new instance; calls already in flight keep
    the snapshot they started with.
    """

    model_config = SettingsConfigDict(
        env_prefix="XAPI_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    endpoint: str = "http://localhost:8000/xapi/"
    user: str | None = None
    password: str | None = Field(default=None, repr=False)
    # Pre-built Authorization header value; wins over user/password when set.
    auth: str | None = Field(default=None, repr=False)
    version: str = "1.0.3"

    # Deliver pre-dispatch validation failures by raising, even to callback callers.
    strict_callbacks: bool = False

    service_name: str = "xapi-client"
    log_level: str = "INFO"

    @field_validator("endpoint")
    @classmethod
    def _trailing_slash(cls, v: str) -> str:
        # urljoin drops the last path segment unless the base ends with "/".
        return v if v.endswith("/") else v + "/"

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> ClientContext:
        known = {k: v for k, v in _normalize_keys(options).items() if k in cls.model_fields}
        return cls(**known)

    def with_options(self, options: Mapping[str, Any]) -> ClientContext:
        merged = self.model_dump()
        merged.update(_normalize_keys(options))
        return type(self).from_options(merged)

    def authorization(self) -> str | None:
        if self.auth:
            return self.auth
        if self.user is None and self.password is None:
            return None
        raw = f"{self.user or ''}:{self.password or ''}".encode()
        return "Basic " + base64.b64encode(raw).decode("ascii")


def _normalize_keys(options: Mapping[str, Any]) -> dict[str, Any]:
    # strictCallbacks -> strict_callbacks
    return {_CAMEL_BOUNDARY.sub("_", str(k)).lower(): v for k, v in options.items()}


@lru_cache(maxsize=1)
def get_context() -> ClientContext:
    # Cache avoids re-parsing env vars for every client built from the environment.
    return ClientContext()


# --- Module Notes -----------------------------------------------------------
# The dispatcher reads the context it is handed; it never reaches for get_context(),
# so several differently configured clients can coexist in one process.
