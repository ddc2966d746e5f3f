"""URL normalization and tracking parameter removal."""

from __future__ import annotations

from typing import List
from urllib.parse import unquote_plus, urlsplit, urlunsplit

DEFAULT_SCHEME = "https"

TRACKING_PARAMS = frozenset(
    {
        # UTM
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "utm_cid",
        "utm_reader",
        "utm_name",
        "utm_social",
        "utm_social-type",
        # Facebook
        "fbclid",
        "fb_action_ids",
        "fb_action_types",
        "fb_source",
        "fb_ref",
        # Google
        "gclid",
        "gclsrc",
        "dclid",
        "gdftrk",
        "gdffi",
        "ga_source",
        "ga_medium",
        "ga_term",
        "ga_content",
        "ga_campaign",
        # referral aliases and mailing platforms
        "referrer",
        "ref",
        "source",
        "origin",
        "mc_cid",
        "mc_eid",
        "_hsenc",
        "_hsmi",
        "ICID",
        "icid",
        "ito",
        "yclid",
        "_openstat",
        "mkt_tok",
    }
)

TRACKING_PREFIXES = ("utm_", "fb_", "ga_", "_")


def is_tracking_param(key: str) -> bool:
    return key in TRACKING_PARAMS or key.startswith(TRACKING_PREFIXES)


def _query_key(pair: str) -> str:
    return unquote_plus(pair.split("=", 1)[0])


def _ensure_scheme(raw: str) -> str:
    url = raw.strip()
    if "://" not in url:
        url = f"{DEFAULT_SCHEME}://{url.lstrip('/')}"
    return url


def normalize_url(raw: str) -> str:
    """Return ``raw`` with a scheme, without fragment and tracking parameters.

    Surviving query pairs are kept verbatim and in their original order so
    that normalizing twice gives the same string. Malformed input is returned
    scheme-prefixed instead of raising.
    """

    url = _ensure_scheme(raw)
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    pairs: List[str] = [pair for pair in parts.query.split("&") if pair] if parts.query else []
    kept = [pair for pair in pairs if not is_tracking_param(_query_key(pair))]

    if not kept:
        query = ""
    elif len(kept) != len(pairs):
        query = "&".join(kept)
    else:
        query = parts.query

    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


def normalize_image_url(raw: str) -> str:
    """Scheme-prefix an image URL and drop its fragment, keeping its query as is."""

    url = raw.strip()
    if url.startswith("//"):
        url = f"{DEFAULT_SCHEME}:{url}"
    url = _ensure_scheme(url)
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))


__all__ = [
    "TRACKING_PARAMS",
    "TRACKING_PREFIXES",
    "is_tracking_param",
    "normalize_image_url",
    "normalize_url",
]
