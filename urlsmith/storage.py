"""CSV and summary storage for redirect resolution results."""

from __future__ import annotations

import csv
import json
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .resolver import MAX_REDIRECTS_NOTE, RedirectOutcome

OUTPUT_COLUMNS = [
    "original_url",
    "final_url",
    "hop_count",
    "status_code",
    "elapsed_ms",
    "was_redirected",
    "cookie_wall_suspected",
    "note",
    "error",
]

URL_COLUMNS = ("url", "link", "website")


def outcome_row(outcome: RedirectOutcome) -> Dict[str, str]:
    return {
        "original_url": outcome.original_url,
        "final_url": outcome.final_url,
        "hop_count": str(outcome.hop_count),
        "status_code": str(outcome.status_code) if outcome.status_code is not None else "",
        "elapsed_ms": str(outcome.elapsed_ms),
        "was_redirected": str(outcome.was_redirected).lower(),
        "cookie_wall_suspected": str(outcome.cookie_wall_suspected).lower(),
        "note": outcome.note or "",
        "error": outcome.error or "",
    }


def read_input_csv(path: Path) -> List[Dict[str, str]]:
    with path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        return [dict(row) for row in reader]


def extract_urls(records: Iterable[Dict[str, str]]) -> List[str]:
    urls: List[str] = []
    for record in records:
        lowered = {(key or "").strip().lower(): value for key, value in record.items()}
        value: Optional[str] = next((lowered[column] for column in URL_COLUMNS if lowered.get(column)), None)
        if value and value.strip():
            urls.append(value.strip())
    return urls


def write_output_csv(path: Path, outcomes: Iterable[RedirectOutcome]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=OUTPUT_COLUMNS)
        writer.writeheader()
        for outcome in outcomes:
            writer.writerow(outcome_row(outcome))


def summarize(outcomes: Iterable[RedirectOutcome]) -> Dict[str, int]:
    summary: Counter = Counter()
    for outcome in outcomes:
        summary["resolved"] += 1
        if outcome.error:
            summary["errors"] += 1
        if outcome.was_redirected:
            summary["redirected"] += 1
        if outcome.cookie_wall_suspected:
            summary["cookie_walls"] += 1
        if outcome.note == MAX_REDIRECTS_NOTE:
            summary["max_redirects_reached"] += 1
    return {
        key: summary.get(key, 0)
        for key in ("resolved", "redirected", "errors", "cookie_walls", "max_redirects_reached")
    }


def write_summary_json(path: Path, summary: Dict[str, int]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(summary, indent=2, sort_keys=True))


__all__ = [
    "OUTPUT_COLUMNS",
    "extract_urls",
    "outcome_row",
    "read_input_csv",
    "summarize",
    "write_output_csv",
    "write_summary_json",
]
