"""Create a delivery task from the command line.

Example:
    python scripts/create_task.py --pack PACK-042 --agent agent-7 \
        --source "Panbazar Police Station" --destination "Cotton University" \
        --start 2026-03-01T08:00:00 --end 2026-03-01T13:00:00 \
        --pickup 26.1862,91.7457 --target 26.1869,91.7468
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.custody_tracker.custody_tracker.common.datetime_utils import parse_iso_datetime
from src.custody_tracker.custody_tracker.common.validators import parse_enum
from src.custody_tracker.custody_tracker.container import build_container
from src.custody_tracker.custody_tracker.core.enums import ExamType, ShiftType
from src.custody_tracker.custody_tracker.core.exceptions import DomainError


def _coords(value: str | None):
    if not value:
        return None
    lat, _, lng = value.partition(",")
    return lat, lng


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a sealed-pack delivery task.")
    parser.add_argument("--pack", required=True, help="sealed pack code (unique)")
    parser.add_argument("--agent", required=True, help="assigned delivery agent user id")
    parser.add_argument("--source", required=True)
    parser.add_argument("--destination", required=True)
    parser.add_argument("--start", required=True, help="ISO-8601, UTC if no offset")
    parser.add_argument("--end", required=True, help="ISO-8601, UTC if no offset")
    parser.add_argument("--exam-type", default=ExamType.REGULAR.value)
    parser.add_argument("--shift", default=None, help="MORNING or AFTERNOON (double shift)")
    parser.add_argument("--pickup", default=None, help="lat,lng of the police station")
    parser.add_argument("--target", default=None, help="lat,lng of the exam center")
    parser.add_argument("--radius", type=int, default=None, help="geofence radius in meters")
    parser.add_argument("--travel-minutes", type=int, default=None, help="expected pickup -> arrival time")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, upload_dir=settings.UPLOAD_DIR)

    try:
        task = container.task_service.create_task(
            sealed_pack_code=args.pack,
            source_location=args.source,
            destination_location=args.destination,
            assigned_user_id=args.agent,
            start_time=parse_iso_datetime(args.start),
            end_time=parse_iso_datetime(args.end),
            exam_type=parse_enum(ExamType, args.exam_type, "exam_type"),
            is_double_shift=args.shift is not None,
            shift_type=parse_enum(ShiftType, args.shift, "shift") if args.shift else None,
            pickup=_coords(args.pickup),
            destination=_coords(args.target),
            geofence_radius=args.radius,
            expected_travel_time=args.travel_minutes,
        )
    except (DomainError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    print(f"OK: task {task.task_id} ({task.sealed_pack_code}) assigned to {task.assigned_user_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
