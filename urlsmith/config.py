"""Configuration utilities for urlsmith."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Config:
    """Runtime configuration parameters."""

    follow_redirects: bool = True
    max_redirects: int = 5
    timeout: float = 10.0
    user_agent: Optional[str] = None
    concurrency: int = 4
    image_concurrency: int = 3
    proxy_url: Optional[str] = None
    summary_json: Path = Path("urlsmith.summary.json")


def parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_config(env_file: Optional[str] = ".env") -> Config:
    """Load configuration from environment variables and optional .env file."""

    if env_file:
        load_dotenv(env_file, override=False)

    return Config(
        follow_redirects=parse_bool(os.getenv("URLSMITH_FOLLOW_REDIRECTS", str(Config.follow_redirects))),
        max_redirects=int(os.getenv("URLSMITH_MAX_REDIRECTS", Config.max_redirects)),
        timeout=float(os.getenv("URLSMITH_TIMEOUT", Config.timeout)),
        user_agent=os.getenv("URLSMITH_USER_AGENT") or None,
        concurrency=int(os.getenv("URLSMITH_CONCURRENCY", Config.concurrency)),
        image_concurrency=int(os.getenv("URLSMITH_IMAGE_CONCURRENCY", Config.image_concurrency)),
        proxy_url=os.getenv("URLSMITH_PROXY_URL") or None,
        summary_json=Path(os.getenv("URLSMITH_SUMMARY_JSON", str(Config.summary_json))),
    )


__all__ = ["Config", "load_config", "parse_bool"]
