"""Static registry of CDN signatures and their image manipulation conventions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple

from .models import CdnType, ManipulationCapabilities, ManipulationStrategy


@dataclass(frozen=True)
class CdnPattern:
    identity: CdnType
    matcher: Pattern[str]
    capabilities: ManipulationCapabilities


def _none(identity: CdnType) -> ManipulationCapabilities:
    return ManipulationCapabilities(strategy=ManipulationStrategy.NONE, cdn_type=identity)


def _entry(identity: CdnType, pattern: str, capabilities: Optional[ManipulationCapabilities] = None) -> CdnPattern:
    return CdnPattern(
        identity=identity,
        matcher=re.compile(pattern, re.I),
        capabilities=capabilities or _none(identity),
    )


# Order matters: the first matching signature wins.
CDN_PATTERNS: Tuple[CdnPattern, ...] = (
    _entry(
        CdnType.CLOUDINARY,
        r"res\.cloudinary\.com|cloudinary\.com",
        ManipulationCapabilities(
            strategy=ManipulationStrategy.CDN_SPECIFIC,
            cdn_type=CdnType.CLOUDINARY,
            can_adjust_width=True,
            can_adjust_height=True,
            can_adjust_quality=True,
            max_width=5000,
            max_height=5000,
            min_quality=1,
            max_quality=100,
        ),
    ),
    _entry(
        CdnType.IMGIX,
        r"\.imgix\.net",
        ManipulationCapabilities(
            strategy=ManipulationStrategy.CDN_SPECIFIC,
            cdn_type=CdnType.IMGIX,
            can_adjust_width=True,
            can_adjust_height=True,
            can_adjust_quality=True,
            max_width=8192,
            max_height=8192,
            min_quality=0,
            max_quality=100,
        ),
    ),
    _entry(
        CdnType.WORDPRESS,
        r"\.wp\.com|\.wordpress\.com|wp-content/uploads",
        ManipulationCapabilities(
            strategy=ManipulationStrategy.CDN_SPECIFIC,
            cdn_type=CdnType.WORDPRESS,
            can_adjust_width=True,
            can_adjust_height=True,
            max_width=2000,
            max_height=2000,
        ),
    ),
    _entry(
        CdnType.MEDIUM,
        r"miro\.medium\.com",
        ManipulationCapabilities(
            strategy=ManipulationStrategy.QUERY_PARAMETERS,
            cdn_type=CdnType.MEDIUM,
            can_adjust_width=True,
            width_param_name="max",
            max_width=2000,
        ),
    ),
    _entry(CdnType.YOUTUBE, r"i\.ytimg\.com|img\.youtube\.com"),
    _entry(CdnType.VIMEO, r"i\.vimeocdn\.com|vimeo\.com"),
    _entry(CdnType.TWITTER, r"pbs\.twimg\.com|twitter\.com"),
    _entry(CdnType.FACEBOOK, r"fbcdn\.net|facebook\.com"),
    _entry(CdnType.INSTAGRAM, r"cdninstagram\.com|instagram\.com"),
    _entry(CdnType.LINKEDIN, r"media\.licdn\.com|licdn\.com"),
    _entry(CdnType.GITHUB, r"githubusercontent\.com|github\.com"),
    _entry(CdnType.PINTEREST, r"pinimg\.com|pinterest\.com"),
    _entry(
        CdnType.UNSPLASH,
        r"images\.unsplash\.com",
        ManipulationCapabilities(
            strategy=ManipulationStrategy.QUERY_PARAMETERS,
            cdn_type=CdnType.UNSPLASH,
            can_adjust_width=True,
            can_adjust_height=True,
            can_adjust_quality=True,
            width_param_name="w",
            height_param_name="h",
            quality_param_name="q",
            max_width=5000,
            max_height=5000,
            min_quality=0,
            max_quality=100,
        ),
    ),
    _entry(
        CdnType.SHOPIFY,
        r"cdn\.shopify\.com",
        ManipulationCapabilities(
            strategy=ManipulationStrategy.QUERY_PARAMETERS,
            cdn_type=CdnType.SHOPIFY,
            can_adjust_width=True,
            width_param_name="width",
            max_width=5760,
        ),
    ),
    _entry(CdnType.PEXELS, r"images\.pexels\.com"),
    _entry(CdnType.GOOGLE_USER_CONTENT, r"googleusercontent\.com|ggpht\.com"),
    _entry(CdnType.CLOUDFRONT, r"\.cloudfront\.net"),
    _entry(CdnType.AKAMAI, r"\.akamaized\.net|\.akamai\.net"),
    _entry(CdnType.FASTLY, r"\.fastly\.net|\.fastlylb\.net"),
)

_CAPABILITIES: Dict[CdnType, ManipulationCapabilities] = {
    pattern.identity: pattern.capabilities for pattern in CDN_PATTERNS
}


def detect_cdn(url: str) -> CdnType:
    for pattern in CDN_PATTERNS:
        if pattern.matcher.search(url):
            return pattern.identity
    return CdnType.NONE


def capabilities_for(identity: CdnType) -> ManipulationCapabilities:
    """Registered defaults for ``identity``, or a ``none`` descriptor."""

    return _CAPABILITIES.get(identity) or _none(identity)


__all__ = ["CDN_PATTERNS", "CdnPattern", "capabilities_for", "detect_cdn"]
