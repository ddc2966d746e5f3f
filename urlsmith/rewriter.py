"""Synthesis of resized image URLs from a capability descriptor."""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import SplitResult, quote, unquote_plus, urlsplit, urlunsplit

from .analyzer import (
    FILENAME_SUFFIX_RE,
    SIZE_PREFIX_RE,
    PathPattern,
    analyze_path_segments,
    path_segments,
)
from .models import CdnType, ManipulationCapabilities, ManipulationStrategy

logger = logging.getLogger(__name__)

DEFAULT_MIN_QUALITY = 1
DEFAULT_MAX_QUALITY = 100

DEFAULT_RESPONSIVE_SIZES: Tuple[Mapping[str, int], ...] = (
    {"width": 320},
    {"width": 640},
    {"width": 1024},
    {"width": 1600},
)

# Cloudinary transformation parameter keys, used to recognise an existing
# transformation segment right after the ``upload`` anchor.
CLOUDINARY_PARAM_KEYS = frozenset(
    {"a", "ar", "b", "bo", "c", "co", "dpr", "e", "f", "fl", "g", "h", "l", "o", "q", "r", "t", "u", "w", "x", "y", "z"}
)
CLOUDINARY_TOKEN_RE = re.compile(r"^([a-z]{1,3})_[^,]+$")


def clamp(value: int, low: int, high: Optional[int]) -> int:
    if high is not None and value > high:
        value = high
    return max(low, value)


def _clamp_width(caps: ManipulationCapabilities, width: int) -> int:
    return clamp(width, 1, caps.max_width)


def _clamp_height(caps: ManipulationCapabilities, height: int) -> int:
    return clamp(height, 1, caps.max_height)


def _clamp_quality(caps: ManipulationCapabilities, quality: int) -> int:
    low = caps.min_quality if caps.min_quality is not None else DEFAULT_MIN_QUALITY
    high = caps.max_quality if caps.max_quality is not None else DEFAULT_MAX_QUALITY
    return clamp(quality, low, high)


def set_query_params(parts: SplitResult, updates: Mapping[str, str]) -> str:
    """Set or replace ``updates`` in the query, leaving every other pair untouched.

    Every occurrence of a repeated key takes the new value in place.
    """

    pending = dict(updates)
    pairs: List[str] = []
    for pair in parts.query.split("&") if parts.query else []:
        key = unquote_plus(pair.split("=", 1)[0])
        if key in updates:
            pairs.append(f"{quote(key, safe='')}={updates[key]}")
            pending.pop(key, None)
        else:
            pairs.append(pair)
    pairs.extend(f"{quote(key, safe='')}={value}" for key, value in pending.items())
    return urlunsplit(parts._replace(query="&".join(pairs)))


def _query_updates(
    caps: ManipulationCapabilities,
    width: Optional[int],
    height: Optional[int],
    quality: Optional[int],
) -> Dict[str, str]:
    updates: Dict[str, str] = {}
    if width is not None and caps.can_adjust_width and caps.width_param_name:
        updates[caps.width_param_name] = str(_clamp_width(caps, width))
    if height is not None and caps.can_adjust_height and caps.height_param_name:
        updates[caps.height_param_name] = str(_clamp_height(caps, height))
    if quality is not None and caps.can_adjust_quality and caps.quality_param_name:
        updates[caps.quality_param_name] = str(_clamp_quality(caps, quality))
    return updates


def _with_query_parameters(
    caps: ManipulationCapabilities,
    base_url: str,
    parts: SplitResult,
    width: Optional[int],
    height: Optional[int],
    quality: Optional[int],
) -> str:
    updates = _query_updates(caps, width, height, quality)
    if not updates:
        return base_url
    return set_query_params(parts, updates)


def _with_path_segments(
    caps: ManipulationCapabilities,
    base_url: str,
    parts: SplitResult,
    width: Optional[int],
    height: Optional[int],
    quality: Optional[int],
) -> str:
    segments = path_segments(parts.path)
    found = analyze_path_segments(segments)
    if found is None:
        return base_url

    new_width = _clamp_width(caps, width) if width is not None and found.width is not None else None
    new_height = _clamp_height(caps, height) if height is not None and found.height is not None else None
    if new_width is None and new_height is None:
        return base_url

    w = new_width if new_width is not None else found.width
    h = new_height if new_height is not None else found.height
    segment = segments[found.segment_index]

    if found.pattern is PathPattern.WIDTH_BY_HEIGHT:
        replacement = f"{w}x{h}"
    elif found.pattern is PathPattern.WIDTH_ONLY:
        replacement = f"w{w}"
    elif found.pattern is PathPattern.HEIGHT_ONLY:
        replacement = f"h{h}"
    elif found.pattern is PathPattern.SIZE_PREFIX:
        separator = SIZE_PREFIX_RE.match(segment).group(1)
        replacement = f"size{separator}{w}x{h}"
    else:
        match = FILENAME_SUFFIX_RE.match(segment)
        replacement = f"{match.group(1)}-{w}x{h}.{match.group(4)}"

    segments[found.segment_index] = replacement
    return urlunsplit(parts._replace(path="/".join(segments)))


def _is_cloudinary_transformation(segment: str) -> bool:
    tokens = segment.split(",")
    for token in tokens:
        match = CLOUDINARY_TOKEN_RE.match(token)
        if not match or match.group(1) not in CLOUDINARY_PARAM_KEYS:
            return False
    return True


def _merge_transformation(segment: str, updates: Mapping[str, str]) -> str:
    """Overwrite the ``updates`` keys in an existing transformation, keeping every other token.

    An existing crop mode is left alone; ``c_fill`` is only added when none is set.
    """

    pending = dict(updates)
    tokens: List[str] = []
    for token in segment.split(","):
        key = token.split("_", 1)[0]
        if key in pending:
            value = pending.pop(key)
            tokens.append(token if key == "c" else f"{key}_{value}")
        else:
            tokens.append(token)
    tokens.extend(f"{key}_{value}" for key, value in pending.items())
    return ",".join(tokens)


def _cloudinary_url(
    caps: ManipulationCapabilities,
    base_url: str,
    parts: SplitResult,
    width: Optional[int],
    height: Optional[int],
    quality: Optional[int],
) -> str:
    segments = path_segments(parts.path)
    try:
        anchor = segments.index("upload")
    except ValueError:
        return base_url
    if anchor >= len(segments) - 1:
        return base_url

    updates: Dict[str, str] = {}
    w = _clamp_width(caps, width) if width is not None and caps.can_adjust_width else None
    h = _clamp_height(caps, height) if height is not None and caps.can_adjust_height else None
    if w is not None or h is not None:
        updates["c"] = "fill"
        if w is not None:
            updates["w"] = str(w)
        if h is not None:
            updates["h"] = str(h)
    if quality is not None and caps.can_adjust_quality:
        updates["q"] = str(_clamp_quality(caps, quality))
    if not updates:
        return base_url

    following = segments[anchor + 1]
    if anchor + 1 < len(segments) - 1 and _is_cloudinary_transformation(following):
        segments[anchor + 1] = _merge_transformation(following, updates)
    else:
        segments.insert(anchor + 1, ",".join(f"{key}_{value}" for key, value in updates.items()))
    return urlunsplit(parts._replace(path="/".join(segments)))


def _imgix_url(
    caps: ManipulationCapabilities,
    base_url: str,
    parts: SplitResult,
    width: Optional[int],
    height: Optional[int],
    quality: Optional[int],
) -> str:
    updates: Dict[str, str] = {}
    if width is not None and caps.can_adjust_width:
        updates["w"] = str(_clamp_width(caps, width))
    if height is not None and caps.can_adjust_height:
        updates["h"] = str(_clamp_height(caps, height))
    if quality is not None and caps.can_adjust_quality:
        updates["q"] = str(_clamp_quality(caps, quality))
    if not updates:
        return base_url
    updates["auto"] = "format"
    return set_query_params(parts, updates)


def _wordpress_url(
    caps: ManipulationCapabilities,
    base_url: str,
    parts: SplitResult,
    width: Optional[int],
    height: Optional[int],
    quality: Optional[int],
) -> str:
    w = _clamp_width(caps, width) if width is not None and caps.can_adjust_width else None
    h = _clamp_height(caps, height) if height is not None and caps.can_adjust_height else None

    segments = path_segments(parts.path)
    match = FILENAME_SUFFIX_RE.match(segments[-1])
    if match and w is not None and h is not None:
        segments[-1] = f"{match.group(1)}-{w}x{h}.{match.group(4)}"
        return urlunsplit(parts._replace(path="/".join(segments)))

    updates: Dict[str, str] = {}
    if w is not None:
        updates["w"] = str(w)
    if h is not None:
        updates["h"] = str(h)
    if quality is not None and caps.can_adjust_quality:
        updates["quality"] = str(_clamp_quality(caps, quality))
    if not updates:
        return base_url
    return set_query_params(parts, updates)


Builder = Callable[
    [ManipulationCapabilities, str, SplitResult, Optional[int], Optional[int], Optional[int]],
    str,
]

CDN_BUILDERS: Mapping[CdnType, Builder] = {
    CdnType.CLOUDINARY: _cloudinary_url,
    CdnType.IMGIX: _imgix_url,
    CdnType.WORDPRESS: _wordpress_url,
}


def _with_cdn_specific(
    caps: ManipulationCapabilities,
    base_url: str,
    parts: SplitResult,
    width: Optional[int],
    height: Optional[int],
    quality: Optional[int],
) -> str:
    builder = CDN_BUILDERS.get(caps.cdn_type)
    if builder is None:
        return base_url
    return builder(caps, base_url, parts, width, height, quality)


STRATEGY_BUILDERS: Mapping[ManipulationStrategy, Builder] = {
    ManipulationStrategy.QUERY_PARAMETERS: _with_query_parameters,
    ManipulationStrategy.PATH_SEGMENTS: _with_path_segments,
    ManipulationStrategy.CDN_SPECIFIC: _with_cdn_specific,
}


def generate_url(
    capabilities: ManipulationCapabilities,
    base_url: str,
    width: Optional[int] = None,
    height: Optional[int] = None,
    quality: Optional[int] = None,
) -> str:
    """Rewrite ``base_url`` to request the given size and quality.

    Values are clamped into the descriptor's bounds. Axes the strategy cannot
    express are dropped; when nothing applies ``base_url`` is returned as is.
    """

    if width is None and height is None and quality is None:
        return base_url
    builder = STRATEGY_BUILDERS.get(capabilities.strategy)
    if builder is None:
        return base_url
    try:
        parts = urlsplit(base_url)
    except ValueError:
        logger.debug("Cannot rewrite unparsable URL %s", base_url)
        return base_url
    return builder(capabilities, base_url, parts, width, height, quality)


def generate_responsive_urls(
    capabilities: ManipulationCapabilities,
    base_url: str,
    sizes: Iterable[Mapping[str, int]] = DEFAULT_RESPONSIVE_SIZES,
) -> List[str]:
    """Distinct resized variants of ``base_url``, one per requested size."""

    if not (capabilities.can_adjust_width or capabilities.can_adjust_height):
        return [base_url]

    urls: List[str] = []
    for size in sizes:
        width = size.get("width")
        height = size.get("height")
        if width is None and height is None:
            continue
        url = generate_url(capabilities, base_url, width=width, height=height)
        if url != base_url and url not in urls:
            urls.append(url)
    return urls


def parse_sizes(value: str) -> List[Dict[str, int]]:
    """Parse ``"320,640x480,h200"`` into size mappings."""

    sizes: List[Dict[str, int]] = []
    for token in (part.strip().lower() for part in value.split(",")):
        if not token:
            continue
        if "x" in token:
            width, height = token.split("x", 1)
            sizes.append({"width": int(width), "height": int(height)})
        elif token.startswith("h"):
            sizes.append({"height": int(token[1:])})
        else:
            sizes.append({"width": int(token.lstrip("w"))})
    return sizes


__all__ = [
    "CDN_BUILDERS",
    "DEFAULT_RESPONSIVE_SIZES",
    "clamp",
    "generate_responsive_urls",
    "generate_url",
    "parse_sizes",
    "set_query_params",
]
