#!/usr/bin/env python3
"""
Run the match-detail parser over a snapshot folder written by
snapshot_match.py and write the result as JSON.

Usage:
    python scripts/parse_snapshot.py data/snapshots/match_110406/
    python scripts/parse_snapshot.py data/snapshots/match_110406/ --output detail.json
"""

import argparse
import json
import logging
import re
import sys
from pathlib import Path

# Allow running from repo root: `python scripts/parse_snapshot.py`
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cricfeed.config import settings
from cricfeed.errors import CricketDataError
from cricfeed.service import get_match_detail

SCORECARD_FILE = "scorecard.html"
LIVE_FILE = "live.html"
COMMENTARY_FILES = ("commentary.json", "commentary-full.json")


def _read_optional(path: Path) -> str | None:
    return path.read_text(encoding="utf-8") if path.exists() else None


def _match_id_from_folder(folder: Path) -> str:
    m = re.search(r"(\d+)", folder.name)
    return m.group(1) if m else ""


def parse_snapshot(folder: Path, match_id: str) -> dict:
    scorecard_html = _read_optional(folder / SCORECARD_FILE)
    commentary = [text for text in (_read_optional(folder / name) for name in COMMENTARY_FILES) if text]

    detail = get_match_detail(
        match_id,
        scorecard_html,
        live_page_html=_read_optional(folder / LIVE_FILE),
        commentary_payloads=commentary,
    )
    return detail.model_dump(mode="json", by_alias=True)


def print_summary(detail: dict) -> None:
    print(f"{detail['title']}  [{detail['statusType']}]")
    print(f"  {detail['status']}")
    print(f"  {detail['team1']['name']}: {detail['team1']['score']}")
    print(f"  {detail['team2']['name']}: {detail['team2']['score']}")
    for inn in detail["innings"]:
        print(
            f"  Innings {inn['inningsId']}: {inn['battingTeam']} {inn['scoreLine']}"
            f"  ({len(inn['batsmen'])} batters, {len(inn['bowlers'])} bowlers,"
            f" {len(inn['yetToBat'])} yet to bat)"
        )
    live = detail.get("liveState")
    if live:
        balls = " ".join(ball["value"] for ball in live["recentBalls"])
        print(f"  Live: over {live['currentOverLabel']}, CRR {live['currentRunRate']}, recent: {balls or '-'}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Parse a saved match snapshot into detail JSON")
    parser.add_argument("folder", type=Path, help="Snapshot folder (from snapshot_match.py)")
    parser.add_argument("--match-id", default=None, help="Match ID (default: digits in the folder name)")
    parser.add_argument("--output", type=Path, default=None, help="Output JSON path (default: <folder>/detail.json)")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level)

    folder: Path = args.folder
    if not folder.is_dir():
        print(f"Error: {folder} is not a directory")
        sys.exit(1)

    match_id = args.match_id or _match_id_from_folder(folder)
    try:
        detail = parse_snapshot(folder, match_id)
    except CricketDataError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    out_path = args.output or folder / "detail.json"
    out_path.write_text(json.dumps(detail, indent=2, ensure_ascii=False), encoding="utf-8")

    print_summary(detail)
    print(f"\nWritten to {out_path}")


if __name__ == "__main__":
    main()
