from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.custody_tracker.custody_tracker.database.bootstrap import ensure_demo_task


def main() -> None:
    parser = argparse.ArgumentParser(description="Insert the demo delivery task if it is missing.")
    parser.add_argument("--agent", default="demo-agent", help="user id the demo task is assigned to")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_task(db_config, assigned_user_id=args.agent)

    print(
        "OK: Seeded demo task -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
