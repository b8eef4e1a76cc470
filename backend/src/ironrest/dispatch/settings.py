"""Process-wide REST settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PREFIX = "/api"


@dataclass(frozen=True)
class RestSettings:
    """Settings shared by every collection.

    Attributes:
        prefix: URL prefix the routes are served under
        access_token: Shared secret expected in x-ironrest-auth-token.
            Empty means every request is rejected.
    """

    prefix: str = DEFAULT_PREFIX
    access_token: str = ""

    @classmethod
    def from_env(cls) -> RestSettings:
        """Read IRONREST_PREFIX and IRONREST_ACCESS_TOKEN."""
        return cls(
            prefix=os.environ.get("IRONREST_PREFIX", DEFAULT_PREFIX),
            access_token=os.environ.get("IRONREST_ACCESS_TOKEN", ""),
        )

    @property
    def normalized_prefix(self) -> str:
        """Prefix with a leading slash and no trailing slash ("" for root)."""
        prefix = self.prefix.strip("/")
        return f"/{prefix}" if prefix else ""
