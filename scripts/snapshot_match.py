#!/usr/bin/env python3
"""
Save the raw upstream pages for one match so they can be parsed offline.

Fetches four sources for a given Cricbuzz match ID:
  1. Scorecard page     (mandatory)
  2. Live scores page   (optional)
  3. commentary.json    (optional)
  4. commentary-full.json (optional)

Usage:
    python scripts/snapshot_match.py <match_id> [--output-dir DIR]

Example:
    python scripts/snapshot_match.py 110406
    python scripts/snapshot_match.py 110406 --output-dir data/snapshots/my_match/
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

# Allow running from repo root: `python scripts/snapshot_match.py`
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cricfeed.config import settings
from cricfeed.errors import CricketDataError
from cricfeed.feed.fetcher import commentary_urls, live_page_url, scorecard_url
from cricfeed.feed.http import fetch_html, fetch_json, make_client

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SCORECARD_FILE = "scorecard.html"
LIVE_FILE = "live.html"
COMMENTARY_FILES = ("commentary.json", "commentary-full.json")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def snapshot_match(match_id: int, output_dir: Path) -> int:
    """Fetch every source for ``match_id`` into ``output_dir``. Returns the number of files saved."""
    output_dir.mkdir(parents=True, exist_ok=True)
    saved = 0

    async with make_client() as client:
        targets = [
            (scorecard_url(match_id), SCORECARD_FILE, fetch_html),
            (live_page_url(match_id), LIVE_FILE, fetch_html),
        ] + [
            (url, name, fetch_json) for url, name in zip(commentary_urls(match_id), COMMENTARY_FILES)
        ]

        for url, name, fetch in targets:
            out_file = output_dir / name
            print(f"Fetching: {url}")
            start = time.time()
            try:
                content = await fetch(client, url)
            except CricketDataError as exc:
                print(f"  ERROR fetching {url}: {exc}")
                continue
            elapsed = time.time() - start

            text = content if isinstance(content, str) else json.dumps(content, indent=2, ensure_ascii=False)
            out_file.write_text(text, encoding="utf-8")
            saved += 1
            print(f"  Saved: {out_file}  ({len(text):,} chars, {elapsed:.1f}s)")

    return saved


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main() -> None:
    parser = argparse.ArgumentParser(description="Save raw Cricbuzz pages for one match")
    parser.add_argument("match_id", type=int, help="Cricbuzz numeric match ID (e.g. 110406)")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Output directory (default: data/snapshots/match_{match_id}/)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level)
    output_dir = args.output_dir or Path(f"data/snapshots/match_{args.match_id}")
    saved = asyncio.run(snapshot_match(args.match_id, output_dir))

    if not (output_dir / SCORECARD_FILE).exists():
        print("Error: the scorecard page could not be fetched.")
        sys.exit(1)

    print(f"\nDone. {saved} file(s) in {output_dir}")


if __name__ == "__main__":
    main()
