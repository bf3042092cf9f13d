"""
Run one mail ingestion cycle from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import asdict

from app.services.ingestion_cycle_service import get_ingestion_cycle_runner


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one mail ingestion cycle.")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level for this run.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    summary = get_ingestion_cycle_runner().run_if_idle()
    if summary is None:
        print(json.dumps({"status": "skipped", "reason": "cycle already running"}, indent=2))
        return 1

    print(json.dumps(asdict(summary), indent=2))
    return 0 if summary.error_count == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
