"""Detection of the manipulation strategy that applies to an image URL."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, urlsplit

from .cdn import capabilities_for, detect_cdn
from .models import NO_CAPABILITIES, CdnType, ManipulationCapabilities, ManipulationStrategy

logger = logging.getLogger(__name__)

WIDTH_ALIASES = ("w", "width", "wd", "wid", "maxwidth", "max-width", "size")
HEIGHT_ALIASES = ("h", "height", "ht", "hgt", "maxheight", "max-height")
QUALITY_ALIASES = ("q", "quality", "qual", "qlt")


class Axis(Enum):
    WIDTH = "width"
    HEIGHT = "height"
    QUALITY = "quality"


_ALIAS_AXIS: Dict[str, Axis] = {
    **{alias: Axis.WIDTH for alias in WIDTH_ALIASES},
    **{alias: Axis.HEIGHT for alias in HEIGHT_ALIASES},
    **{alias: Axis.QUALITY for alias in QUALITY_ALIASES},
}


class PathPattern(Enum):
    WIDTH_BY_HEIGHT = "width_by_height"
    WIDTH_ONLY = "width_only"
    HEIGHT_ONLY = "height_only"
    SIZE_PREFIX = "size_prefix"
    FILENAME_SUFFIX = "filename_suffix"


WIDTH_BY_HEIGHT_RE = re.compile(r"^(\d+)x(\d+)$")
WIDTH_ONLY_RE = re.compile(r"^w(\d+)$")
HEIGHT_ONLY_RE = re.compile(r"^h(\d+)$")
SIZE_PREFIX_RE = re.compile(r"^size([-_])(\d+)x(\d+)$")
FILENAME_SUFFIX_RE = re.compile(r"^(.+)-(\d+)x(\d+)\.([A-Za-z0-9]+)$")


@dataclass(frozen=True)
class QueryParameter:
    name: str
    axis: Axis
    value: int


@dataclass(frozen=True)
class PathDimensions:
    pattern: PathPattern
    segment_index: int
    width: Optional[int] = None
    height: Optional[int] = None


def analyze_query_parameters(query: str) -> Dict[Axis, QueryParameter]:
    """Map each axis to the first numeric query parameter found under one of its aliases."""

    found: Dict[Axis, QueryParameter] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        axis = _ALIAS_AXIS.get(key.lower())
        if axis is None or axis in found:
            continue
        try:
            number = int(value)
        except ValueError:
            continue
        found[axis] = QueryParameter(name=key, axis=axis, value=number)
    return found


def _to_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        # Digit runs past the interpreter's conversion limit.
        return None


def _pair(match: "re.Match[str]", first: int, second: int) -> Optional[Tuple[int, int]]:
    width = _to_int(match.group(first))
    height = _to_int(match.group(second))
    if width is None or height is None:
        return None
    return width, height


def analyze_path_segments(segments: Sequence[str]) -> Optional[PathDimensions]:
    """Find the first dimension-bearing path segment.

    Forms are tried in order over every segment: ``WxH``, then ``wN``/``hN``,
    then ``size_WxH``, and finally a ``name-WxH.ext`` last segment. A segment
    whose digits do not convert to an integer is not a match.
    """

    for index, segment in enumerate(segments):
        match = WIDTH_BY_HEIGHT_RE.match(segment)
        size = _pair(match, 1, 2) if match else None
        if size:
            return PathDimensions(PathPattern.WIDTH_BY_HEIGHT, index, *size)

    for index, segment in enumerate(segments):
        match = WIDTH_ONLY_RE.match(segment)
        value = _to_int(match.group(1)) if match else None
        if value is not None:
            return PathDimensions(PathPattern.WIDTH_ONLY, index, width=value)
        match = HEIGHT_ONLY_RE.match(segment)
        value = _to_int(match.group(1)) if match else None
        if value is not None:
            return PathDimensions(PathPattern.HEIGHT_ONLY, index, height=value)

    for index, segment in enumerate(segments):
        match = SIZE_PREFIX_RE.match(segment)
        size = _pair(match, 2, 3) if match else None
        if size:
            return PathDimensions(PathPattern.SIZE_PREFIX, index, *size)

    if segments:
        index = len(segments) - 1
        match = FILENAME_SUFFIX_RE.match(segments[index])
        size = _pair(match, 2, 3) if match else None
        if size:
            return PathDimensions(PathPattern.FILENAME_SUFFIX, index, *size)

    return None


def path_segments(path: str) -> List[str]:
    return path.split("/")


def _from_query(found: Dict[Axis, QueryParameter], cdn_type: CdnType) -> ManipulationCapabilities:
    width = found.get(Axis.WIDTH)
    height = found.get(Axis.HEIGHT)
    quality = found.get(Axis.QUALITY)

    # Bounds documented by a query-parameter CDN still apply to generic names.
    defaults = capabilities_for(cdn_type)
    if defaults.strategy is not ManipulationStrategy.QUERY_PARAMETERS:
        defaults = NO_CAPABILITIES

    return ManipulationCapabilities(
        strategy=ManipulationStrategy.QUERY_PARAMETERS,
        cdn_type=cdn_type,
        can_adjust_width=width is not None,
        can_adjust_height=height is not None,
        can_adjust_quality=quality is not None,
        width_param_name=width.name if width else None,
        height_param_name=height.name if height else None,
        quality_param_name=quality.name if quality else None,
        max_width=defaults.max_width if width else None,
        max_height=defaults.max_height if height else None,
        min_quality=defaults.min_quality if quality else None,
        max_quality=defaults.max_quality if quality else None,
    )


def analyze_image_url(url: str) -> ManipulationCapabilities:
    """Classify ``url`` into exactly one manipulation strategy.

    Precedence: a CDN with its own syntax, then generic query parameters,
    then generic path segments, then ``none``.
    """

    cdn_type = detect_cdn(url)
    if cdn_type is not CdnType.NONE:
        registered = capabilities_for(cdn_type)
        if registered.strategy is ManipulationStrategy.CDN_SPECIFIC:
            return registered

    try:
        parts = urlsplit(url)
    except ValueError:
        logger.debug("Unparsable image URL %s", url)
        return ManipulationCapabilities(cdn_type=cdn_type)

    found = analyze_query_parameters(parts.query)
    if found:
        return _from_query(found, cdn_type)

    dimensions = analyze_path_segments(path_segments(parts.path))
    if dimensions is not None:
        return ManipulationCapabilities(
            strategy=ManipulationStrategy.PATH_SEGMENTS,
            cdn_type=cdn_type,
            can_adjust_width=dimensions.width is not None,
            can_adjust_height=dimensions.height is not None,
        )

    return ManipulationCapabilities(cdn_type=cdn_type)


def detect_dimensions(url: str) -> Tuple[Optional[int], Optional[int]]:
    """Width and height already encoded in ``url``, query first then path."""

    try:
        parts = urlsplit(url)
    except ValueError:
        return None, None

    found = analyze_query_parameters(parts.query)
    width = found[Axis.WIDTH].value if Axis.WIDTH in found else None
    height = found[Axis.HEIGHT].value if Axis.HEIGHT in found else None

    if width is None or height is None:
        dimensions = analyze_path_segments(path_segments(parts.path))
        if dimensions is not None:
            width = width if width is not None else dimensions.width
            height = height if height is not None else dimensions.height
    return width, height


__all__ = [
    "Axis",
    "PathDimensions",
    "PathPattern",
    "QueryParameter",
    "analyze_image_url",
    "analyze_path_segments",
    "analyze_query_parameters",
    "detect_dimensions",
    "path_segments",
]
