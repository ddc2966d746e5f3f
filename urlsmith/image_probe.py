"""Image URL analysis with an optional header probe."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .analyzer import analyze_image_url, detect_dimensions
from .config import Config
from .models import NO_CAPABILITIES, ManipulationCapabilities
from .normalizer import normalize_image_url
from .resolver import DEFAULT_USER_AGENT
from .rewriter import generate_url

logger = logging.getLogger(__name__)

MAX_LENGTH_DIGITS = 18


@dataclass
class ImageMetadata:
    image_url: str
    capabilities: ManipulationCapabilities = NO_CAPABILITIES
    width: Optional[int] = None
    height: Optional[int] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    error: Optional[str] = None

    @property
    def aspect_ratio(self) -> Optional[float]:
        if self.width and self.height:
            return self.width / self.height
        return None

    def generate_url(
        self, width: Optional[int] = None, height: Optional[int] = None, quality: Optional[int] = None
    ) -> str:
        return generate_url(self.capabilities, self.image_url, width=width, height=height, quality=quality)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imageUrl": self.image_url,
            "width": self.width,
            "height": self.height,
            "aspectRatio": self.aspect_ratio,
            "mimeType": self.mime_type,
            "fileSize": self.file_size,
            "error": self.error,
            "manipulationCapabilities": self.capabilities.to_dict(),
        }


def apply_proxy(proxy_url: Optional[str], target_url: str) -> str:
    """Route ``target_url`` through ``proxy_url``.

    A ``{url}`` placeholder receives the percent-encoded target; any other
    proxy form gets the target appended.
    """

    if not proxy_url:
        return target_url
    if "{url}" in proxy_url:
        return proxy_url.replace("{url}", quote(target_url, safe=""))
    return f"{proxy_url}{quote(target_url, safe=':/?&=%#@+,;')}"


class ImageProbe:
    """Analyze image URLs and read their type and size from response headers."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        user_agent: Optional[str] = None,
        proxy_url: Optional[str] = None,
        attempts: int = 3,
        backoff: float = 1.0,
        concurrency: int = 3,
    ) -> None:
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(follow_redirects=True)
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.proxy_url = proxy_url
        self.attempts = attempts
        self.backoff = backoff
        self.concurrency = concurrency

    @classmethod
    def from_config(cls, config: Config, client: Optional[httpx.AsyncClient] = None) -> "ImageProbe":
        return cls(
            client=client,
            timeout=config.timeout,
            user_agent=config.user_agent,
            proxy_url=config.proxy_url,
            concurrency=config.image_concurrency,
        )

    async def __aenter__(self) -> "ImageProbe":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def analyze(self, url: str, fetch_headers: bool = True) -> ImageMetadata:
        image_url = normalize_image_url(url)
        width, height = detect_dimensions(image_url)
        metadata = ImageMetadata(
            image_url=image_url,
            capabilities=analyze_image_url(image_url),
            width=width,
            height=height,
        )
        if not fetch_headers:
            return metadata

        target = apply_proxy(self.proxy_url, image_url)
        try:
            async for attempt in AsyncRetrying(
                reraise=True,
                stop=stop_after_attempt(self.attempts),
                wait=wait_exponential(multiplier=self.backoff, max=4),
                retry=retry_if_exception_type(httpx.TransportError),
            ):
                with attempt:
                    response = await self.client.head(
                        target,
                        headers={"User-Agent": self.user_agent},
                        timeout=self.timeout,
                    )
                    if response.status_code == 200:
                        metadata.mime_type = response.headers.get("content-type")
                        length = response.headers.get("content-length")
                        if length and length.isdigit() and len(length) <= MAX_LENGTH_DIGITS:
                            metadata.file_size = int(length)
                    else:
                        logger.debug("Header probe for %s returned %s", image_url, response.status_code)
                    return metadata
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Header probe failed for %s: %s", image_url, exc)
            metadata.error = str(exc) or exc.__class__.__name__
        return metadata

    async def analyze_many(
        self, urls: Iterable[str], fetch_headers: bool = True, concurrency: Optional[int] = None
    ) -> List[ImageMetadata]:
        semaphore = asyncio.Semaphore(concurrency or self.concurrency)

        async def worker(item: str) -> ImageMetadata:
            async with semaphore:
                return await self.analyze(item, fetch_headers=fetch_headers)

        return list(await asyncio.gather(*(worker(item) for item in urls)))


__all__ = ["ImageMetadata", "ImageProbe", "apply_proxy"]
