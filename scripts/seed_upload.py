"""
Register a hotel's seed file from CLI.
"""

from __future__ import annotations

import argparse
import json
import uuid
from datetime import date
from pathlib import Path

from app.services.seed_upload_service import get_seed_upload_service


def main() -> int:
    parser = argparse.ArgumentParser(description="Upload a hotel's one-time seed file.")
    parser.add_argument("hotel_id", type=uuid.UUID, help="Hotel id.")
    parser.add_argument("path", type=Path, help="History/forecast file to register as seed.")
    parser.add_argument(
        "--onboarding-date",
        dest="onboarding_date",
        type=date.fromisoformat,
        default=None,
        help="Snapshot date for the seed (YYYY-MM-DD); defaults to now.",
    )
    args = parser.parse_args()

    result = get_seed_upload_service().register_seed(
        args.hotel_id,
        args.path.read_bytes(),
        args.path.name,
        onboarding_date=args.onboarding_date,
    )
    payload = {
        "snapshot_id": str(result.snapshot_id),
        "snapshot_time": result.snapshot_time.isoformat(),
        "filename": result.filename,
        "row_count": result.row_count,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
