# core/career_config.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

from ai.prompts import DISCOVER_SYSTEM_PROMPT, JOB_SEARCH_TERMS_PROMPT
from core.errors import UpstreamServiceError
from telemetry.logger import log_event


@dataclass(frozen=True)
class CareerConfig:
    discover_prompt: str
    job_search_terms_prompt: str


DEFAULT_CONFIG = CareerConfig(
    discover_prompt=DISCOVER_SYSTEM_PROMPT,
    job_search_terms_prompt=JOB_SEARCH_TERMS_PROMPT,
)

Fetcher = Callable[[str], Awaitable[Any]]


async def fetch_config_rows(url: str) -> Any:
    async with httpx.AsyncClient(timeout=15) as client_http:
        resp = await client_http.get(url)
        resp.raise_for_status()
        return resp.json()


def parse_config_rows(rows: Any) -> CareerConfig:
    """
    The sheet is flat: take the first row that actually carries a discover prompt.
    Missing optional prompts fall back to the built-in ones.
    """
    if not isinstance(rows, list):
        raise ValueError("Career config must be a list of rows")

    data_row = next(
        (r for r in rows if isinstance(r, dict) and (r.get("discover_step_prompt") or "").strip()),
        None,
    )
    if data_row is None:
        raise ValueError("No row with a discover_step_prompt in career config")

    return CareerConfig(
        discover_prompt=data_row["discover_step_prompt"].strip(),
        job_search_terms_prompt=(data_row.get("job_search_terms_prompt") or "").strip()
        or JOB_SEARCH_TERMS_PROMPT,
    )


class CareerConfigCache:
    """
    Prompt configuration with an explicit TTL. One instance per app,
    handed to routes through a dependency.
    """

    def __init__(
        self,
        url: str = "",
        ttl_seconds: float = 300.0,
        fetcher: Optional[Fetcher] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.url = (url or "").strip()
        self.ttl_seconds = ttl_seconds
        self._fetcher = fetcher or fetch_config_rows
        self._clock = clock
        self._value: Optional[CareerConfig] = None
        self._fetched_at: float = 0.0

    def _fresh(self) -> bool:
        return self._value is not None and (self._clock() - self._fetched_at) <= self.ttl_seconds

    def invalidate(self) -> None:
        self._value = None
        self._fetched_at = 0.0

    async def get(self) -> CareerConfig:
        if not self.url:
            return DEFAULT_CONFIG
        if self._fresh():
            return self._value  # type: ignore[return-value]

        try:
            rows = await self._fetcher(self.url)
            value = parse_config_rows(rows)
        except (httpx.HTTPError, ValueError) as e:
            log_event("career_config_refresh_failed", {"error": type(e).__name__, "stale": self._value is not None})
            if self._value is not None:
                return self._value
            raise UpstreamServiceError("Failed to load career configuration") from e

        self._value = value
        self._fetched_at = self._clock()
        return value

