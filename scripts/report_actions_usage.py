#!/usr/bin/env python3
"""Report GitHub Actions billable usage for an organization's repositories.

Usage:
  python scripts/report_actions_usage.py --org ORG [--api-token TOKEN] [--num-repos 25]
      [--num-days 5] [--public] [--mode aggregate|raw] [--workers 1] [--max-pages 10] [--output PATH|-] [-v]

Notes:
- Without a token only public data is reachable and GitHub rate limits are tight
- Writes gh-action-usage-<org>-<YYYY-MM-DD>.csv (window start date) unless --output is given
- Nothing is written when any request other than a 404 fails
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

_root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _root_dir not in sys.path:
    sys.path.insert(0, _root_dir)

from dotenv import load_dotenv

from actions_usage.adapters.source_provider import SourceProvider
from actions_usage.config import ReportSettings
from actions_usage.errors import ReportConfigError, UsageSourceError
from actions_usage.services.export_service import EXPORT_MODES
from actions_usage.services.report_service import build_report, report_file_name

log = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Report GitHub Actions billable usage as CSV")
    ap.add_argument("--org", default=None, help="GitHub org name (default: $ACTIONS_USAGE_ORG)")
    ap.add_argument("--api-token", default=None, help="GitHub API token (default: $GITHUB_TOKEN)")
    ap.add_argument("--num-repos", type=int, default=None, help="Number of repos to inspect (default 25)")
    ap.add_argument(
        "--num-days",
        type=int,
        default=None,
        help="The number of days to inspect usage for (default 5)",
    )
    ap.add_argument("--public", action="store_true", help="Inspect public repos instead of private")
    ap.add_argument("--mode", choices=EXPORT_MODES, default=None, help="aggregate (default) or raw per-run rows")
    ap.add_argument("--workers", type=int, default=None, help="Repositories walked in parallel (default 1)")
    ap.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Pages of 100 fetched per workflow and run listing before failing (default 10)",
    )
    ap.add_argument("--output", default=None, help="Output path, or - for stdout")
    ap.add_argument("-v", "--verbose", action="store_true", help="Run in verbose mode")
    return ap


def main(
    argv: Optional[Sequence[str]] = None,
    provider: Optional[SourceProvider] = None,
    now: Optional[datetime] = None,
) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    load_dotenv()

    log.info("booting up client for analysis")
    try:
        settings = ReportSettings.from_env(
            org=args.org,
            token=args.api_token,
            num_repos=args.num_repos,
            num_days=args.num_days,
            repo_type="public" if args.public else None,
            mode=args.mode,
            max_workers=args.workers,
            max_pages=args.max_pages,
            output=args.output,
            verbose=args.verbose,
        )
    except ReportConfigError as e:
        log.error("%s", e)
        return 2

    try:
        text, since = build_report(settings, provider=provider, now=now)
    except UsageSourceError as e:
        log.error("failed to retrieve usage data, err: %s", e)
        return 1

    if settings.output == "-":
        sys.stdout.write(text)
        return 0

    path = Path(settings.output or report_file_name(settings.org, since))
    path.write_text(text, encoding="utf-8", newline="")
    log.info("data written to %r", str(path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
