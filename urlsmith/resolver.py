"""Bounded redirect resolution over HEAD probes."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlsplit

import httpx

from .config import Config
from .normalizer import normalize_url

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MAX_REDIRECTS_NOTE = "Maximum redirect count reached"

_ABSOLUTE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


@dataclass(frozen=True)
class RedirectOutcome:
    original_url: str
    final_url: str
    hop_count: int
    elapsed_ms: int
    error: Optional[str] = None
    cookie_wall_suspected: bool = False
    note: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def was_redirected(self) -> bool:
        return self.original_url != self.final_url

    @property
    def is_successful(self) -> bool:
        return self.error is None and self.status_code in (None, 200)

    @property
    def is_reachable(self) -> bool:
        return self.error is None and self.status_code is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["was_redirected"] = self.was_redirected
        data["is_successful"] = self.is_successful
        return data


def resolve_location(current: str, location: str) -> str:
    """Resolve a ``Location`` header value against the URL that returned it."""

    location = location.strip()
    if _ABSOLUTE_RE.match(location):
        return location
    parts = urlsplit(current)
    if location.startswith("//"):
        return f"{parts.scheme}:{location}"
    if location.startswith("/"):
        return f"{parts.scheme}://{parts.netloc}{location}"
    return urljoin(current, location)


def looks_like_cookie_wall(body: str) -> bool:
    if not body:
        return False
    text = body.lower()
    return "cookie" in text and ("consent" in text or "accept" in text)


class RedirectResolver:
    """Follow redirects with HEAD probes up to ``max_redirects`` hops.

    The resolver never retries: a transport failure or timeout ends the
    resolution and is reported through ``RedirectOutcome.error``.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        follow_redirects: bool = True,
        max_redirects: int = 5,
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        concurrency: int = 4,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()
        self.follow_redirects = follow_redirects
        self.max_redirects = max_redirects
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.concurrency = concurrency

    @classmethod
    def from_config(cls, config: Config, client: Optional[httpx.AsyncClient] = None) -> "RedirectResolver":
        return cls(
            client=client,
            follow_redirects=config.follow_redirects,
            max_redirects=config.max_redirects,
            timeout=config.timeout,
            user_agent=config.user_agent,
            concurrency=config.concurrency,
        )

    async def __aenter__(self) -> "RedirectResolver":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def optimize(self, url: str) -> RedirectOutcome:
        current = normalize_url(url)
        if not self.follow_redirects:
            return RedirectOutcome(original_url=url, final_url=current, hop_count=0, elapsed_ms=0)

        start = time.perf_counter()
        hop_count = 0
        status_code: Optional[int] = None
        cookie_wall = False
        note: Optional[str] = None
        probed = current

        def elapsed() -> int:
            return int((time.perf_counter() - start) * 1000)

        while True:
            if hop_count >= self.max_redirects:
                note = MAX_REDIRECTS_NOTE
                current = probed
                logger.info("Stopped after %s redirects for %s", hop_count, url)
                break

            probed = current
            try:
                response = await self.client.head(
                    current,
                    headers={"User-Agent": self.user_agent},
                    timeout=self.timeout,
                    follow_redirects=False,
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning("Probe failed for %s: %s", current, exc)
                return RedirectOutcome(
                    original_url=url,
                    final_url=current,
                    hop_count=hop_count,
                    elapsed_ms=elapsed(),
                    error=str(exc) or exc.__class__.__name__,
                    status_code=status_code,
                )

            status_code = response.status_code
            location = response.headers.get("location", "")
            if 300 <= status_code < 400 and location.strip():
                hop_count += 1
                current = normalize_url(resolve_location(current, location))
                logger.debug("Hop %s: %s -> %s (%s)", hop_count, probed, current, status_code)
                continue

            if status_code == 200 and "text/html" in response.headers.get("content-type", ""):
                cookie_wall = looks_like_cookie_wall(response.text)
            break

        return RedirectOutcome(
            original_url=url,
            final_url=current,
            hop_count=hop_count,
            elapsed_ms=elapsed(),
            cookie_wall_suspected=cookie_wall,
            note=note,
            status_code=status_code,
        )

    async def optimize_many(self, urls: Iterable[str], concurrency: Optional[int] = None) -> List[RedirectOutcome]:
        """Resolve ``urls`` with at most ``concurrency`` probes in flight, keeping input order."""

        semaphore = asyncio.Semaphore(concurrency or self.concurrency)

        async def worker(item: str) -> RedirectOutcome:
            async with semaphore:
                return await self.optimize(item)

        return list(await asyncio.gather(*(worker(item) for item in urls)))


__all__ = [
    "DEFAULT_USER_AGENT",
    "MAX_REDIRECTS_NOTE",
    "RedirectOutcome",
    "RedirectResolver",
    "looks_like_cookie_wall",
    "resolve_location",
]
