"""
Exporter configuration: credentials, which nodes to scrape, and how hard
to lean on the Catchpoint API.

Validated once at startup. A bad config is a ConfigError and the exporter
refuses to start; nothing here is re-checked per scrape.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable, Tuple

DEFAULT_BASE_URL = "https://io.catchpoint.com/api/v2"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_REQUEST_DELAY_SECONDS = 1.0


class ConfigError(ValueError):
    """Raised when the exporter configuration can't be used."""


class RateLimiter:
    """Sleeps a fixed delay before each upstream call. Zero disables it."""

    def __init__(self, delay_seconds: float = DEFAULT_REQUEST_DELAY_SECONDS):
        if delay_seconds < 0:
            raise ConfigError(f"request delay must be >= 0, got {delay_seconds}")
        self._delay = float(delay_seconds)

    @property
    def delay(self) -> float:
        return self._delay

    def wait(self):
        if self._delay > 0:
            time.sleep(self._delay)


def parse_node_ids(raw: str | Iterable[int] | None) -> Tuple[int, ...]:
    """Turn "1, 2,3" (or an iterable of ints) into a tuple of node ids.

    Blank entries are skipped so a trailing comma or an unset env var
    doesn't blow up; anything that isn't an integer is a ConfigError.
    """
    if raw is None:
        return ()
    parts = raw.split(",") if isinstance(raw, str) else raw

    node_ids = []
    for part in parts:
        if isinstance(part, str):
            part = part.strip()
            if not part:
                continue
        try:
            node_ids.append(int(part))
        except (TypeError, ValueError):
            raise ConfigError(f"invalid node id: {part!r}") from None
    return tuple(node_ids)


@dataclass(frozen=True)
class Config:
    bearer_token: str
    node_ids: Tuple[int, ...] = ()
    rate_limiter: RateLimiter = field(default_factory=RateLimiter)
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def validate(self):
        if not self.bearer_token:
            raise ConfigError("bearer token must be specified")
        if self.timeout_seconds <= 0:
            raise ConfigError(f"timeout must be > 0, got {self.timeout_seconds}")
        if not self.base_url:
            raise ConfigError("base URL must be specified")
