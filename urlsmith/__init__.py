"""URL canonicalization, redirect resolution and image URL rewriting."""

from .analyzer import analyze_image_url, detect_dimensions
from .cdn import capabilities_for, detect_cdn
from .image_probe import ImageMetadata, ImageProbe
from .models import CdnType, ManipulationCapabilities, ManipulationStrategy
from .normalizer import normalize_image_url, normalize_url
from .resolver import RedirectOutcome, RedirectResolver, resolve_location
from .rewriter import generate_responsive_urls, generate_url

__all__ = [
    "CdnType",
    "ImageMetadata",
    "ImageProbe",
    "ManipulationCapabilities",
    "ManipulationStrategy",
    "RedirectOutcome",
    "RedirectResolver",
    "analyze_image_url",
    "capabilities_for",
    "detect_cdn",
    "detect_dimensions",
    "generate_responsive_urls",
    "generate_url",
    "normalize_image_url",
    "normalize_url",
    "resolve_location",
]

__version__ = "0.1.0"
