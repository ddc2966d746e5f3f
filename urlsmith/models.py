"""Value types shared by the CDN registry, analyzer and rewriter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar


class ManipulationStrategy(Enum):
    """How an image URL can be rewritten to request another size."""

    NONE = "none"
    QUERY_PARAMETERS = "queryParameters"
    PATH_SEGMENTS = "pathSegments"
    CDN_SPECIFIC = "cdnSpecific"
    CUSTOM = "custom"


class CdnType(Enum):
    NONE = "none"
    CLOUDINARY = "cloudinary"
    IMGIX = "imgix"
    CLOUDFRONT = "cloudfront"
    AKAMAI = "akamai"
    FASTLY = "fastly"
    GOOGLE_USER_CONTENT = "googleUserContent"
    WORDPRESS = "wordpress"
    SHOPIFY = "shopify"
    MEDIUM = "medium"
    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    GITHUB = "github"
    PINTEREST = "pinterest"
    UNSPLASH = "unsplash"
    PEXELS = "pexels"


E = TypeVar("E", bound=Enum)


def _decode_variant(enum_cls: Type[E], value: Any, default: E) -> E:
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ManipulationCapabilities:
    """What can be adjusted on an image URL and within which bounds."""

    strategy: ManipulationStrategy = ManipulationStrategy.NONE
    cdn_type: CdnType = CdnType.NONE
    can_adjust_width: bool = False
    can_adjust_height: bool = False
    can_adjust_quality: bool = False
    width_param_name: Optional[str] = None
    height_param_name: Optional[str] = None
    quality_param_name: Optional[str] = None
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    min_quality: Optional[int] = None
    max_quality: Optional[int] = None

    @property
    def can_adjust_any(self) -> bool:
        return self.can_adjust_width or self.can_adjust_height or self.can_adjust_quality

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "cdnType": self.cdn_type.value,
            "canAdjustWidth": self.can_adjust_width,
            "canAdjustHeight": self.can_adjust_height,
            "canAdjustQuality": self.can_adjust_quality,
            "widthParamName": self.width_param_name,
            "heightParamName": self.height_param_name,
            "qualityParamName": self.quality_param_name,
            "maxWidth": self.max_width,
            "maxHeight": self.max_height,
            "minQuality": self.min_quality,
            "maxQuality": self.max_quality,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ManipulationCapabilities":
        return cls(
            strategy=_decode_variant(ManipulationStrategy, data.get("strategy"), ManipulationStrategy.NONE),
            cdn_type=_decode_variant(CdnType, data.get("cdnType"), CdnType.NONE),
            can_adjust_width=bool(data.get("canAdjustWidth", False)),
            can_adjust_height=bool(data.get("canAdjustHeight", False)),
            can_adjust_quality=bool(data.get("canAdjustQuality", False)),
            width_param_name=data.get("widthParamName"),
            height_param_name=data.get("heightParamName"),
            quality_param_name=data.get("qualityParamName"),
            max_width=data.get("maxWidth"),
            max_height=data.get("maxHeight"),
            min_quality=data.get("minQuality"),
            max_quality=data.get("maxQuality"),
        )


NO_CAPABILITIES = ManipulationCapabilities()


__all__ = [
    "CdnType",
    "ManipulationCapabilities",
    "ManipulationStrategy",
    "NO_CAPABILITIES",
]
