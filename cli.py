"""Command line interface for urlsmith."""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import List, Optional

import httpx

from urlsmith.config import Config, load_config
from urlsmith.image_probe import ImageProbe
from urlsmith.logging_utils import configure_logging, get_logger
from urlsmith.resolver import RedirectResolver
from urlsmith.rewriter import generate_responsive_urls, parse_sizes
from urlsmith.storage import extract_urls, read_input_csv, summarize, write_output_csv, write_summary_json

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="urlsmith CLI")
    parser.add_argument("--log-file", type=str, help="Optional log file path")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Normalize URLs and follow their redirects")
    resolve.add_argument("urls", nargs="*", help="URLs to resolve")
    resolve.add_argument("--input", help="Input CSV with a url column")
    resolve.add_argument("--output", help="Output CSV for results")
    resolve.add_argument("--summary-json", type=str, help="Summary JSON output path")
    resolve.add_argument("--concurrency", type=int, help="Max concurrent probes")
    resolve.add_argument("--timeout", type=float, help="Per-probe timeout in seconds")
    resolve.add_argument("--max-redirects", type=int, help="Maximum redirects to follow")
    resolve.add_argument("--no-follow", action="store_true", help="Only normalize, never probe")
    resolve.add_argument("--user-agent", type=str, help="User-Agent header for probes")

    image = subparsers.add_parser("image", help="Analyze image URLs and generate resized variants")
    image.add_argument("urls", nargs="+", help="Image URLs")
    image.add_argument("--width", type=int, help="Requested width")
    image.add_argument("--height", type=int, help="Requested height")
    image.add_argument("--quality", type=int, help="Requested quality")
    image.add_argument("--sizes", type=str, help="Responsive sizes, e.g. 320,640,800x600")
    image.add_argument("--probe", action="store_true", help="Fetch image headers for type and size")
    image.add_argument("--proxy-url", type=str, help="Proxy prefix or template with {url}")

    return parser


def apply_resolve_overrides(config: Config, args: argparse.Namespace) -> Config:
    if args.concurrency:
        config.concurrency = args.concurrency
    if args.timeout:
        config.timeout = args.timeout
    if args.max_redirects is not None:
        config.max_redirects = args.max_redirects
    if args.no_follow:
        config.follow_redirects = False
    if args.user_agent:
        config.user_agent = args.user_agent
    if args.summary_json:
        config.summary_json = Path(args.summary_json)
    return config


async def resolve_command(args: argparse.Namespace, client: Optional[httpx.AsyncClient] = None) -> int:
    config = apply_resolve_overrides(load_config(), args)

    urls: List[str] = list(args.urls)
    if args.input:
        input_path = Path(args.input)
        urls.extend(extract_urls(read_input_csv(input_path)))
        logger.info("Loaded %s URLs from %s", len(urls), input_path)
    if not urls:
        logger.warning("No URLs to resolve")
        return 1

    async with RedirectResolver.from_config(config, client=client) as resolver:
        outcomes = await resolver.optimize_many(urls)

    if args.output:
        output_path = Path(args.output)
        write_output_csv(output_path, outcomes)
        logger.info("Wrote %s rows to %s", len(outcomes), output_path)
        write_summary_json(config.summary_json, summarize(outcomes))
        logger.info("Summary saved to %s", config.summary_json)
    else:
        for outcome in outcomes:
            print(json.dumps(outcome.to_dict(), sort_keys=True))

    return 0 if all(outcome.error is None for outcome in outcomes) else 2


async def image_command(args: argparse.Namespace, client: Optional[httpx.AsyncClient] = None) -> int:
    config = load_config()
    if args.proxy_url:
        config.proxy_url = args.proxy_url
    sizes = parse_sizes(args.sizes) if args.sizes else None

    async with ImageProbe.from_config(config, client=client) as probe:
        results = await probe.analyze_many(args.urls, fetch_headers=args.probe)

    for metadata in results:
        payload = metadata.to_dict()
        if args.width or args.height or args.quality:
            payload["generatedUrl"] = metadata.generate_url(
                width=args.width, height=args.height, quality=args.quality
            )
        if sizes:
            payload["responsiveUrls"] = generate_responsive_urls(
                metadata.capabilities, metadata.image_url, sizes
            )
        print(json.dumps(payload, sort_keys=True))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(Path(args.log_file) if args.log_file else None, level=args.log_level)

    if args.command == "resolve":
        return asyncio.run(resolve_command(args))
    if args.command == "image":
        if args.sizes:
            try:
                parse_sizes(args.sizes)
            except ValueError:
                parser.error(f"Invalid --sizes value: {args.sizes}")
        return asyncio.run(image_command(args))
    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
