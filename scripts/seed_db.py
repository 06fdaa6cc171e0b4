from __future__ import annotations

import importlib
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import get_settings_module

from campus_attendance.container import build_store
from campus_attendance.store.seed import DEMO_COURSE_ID, seed_demo_data


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    store = build_store(
        backend=settings.STORE_BACKEND,
        db_config=dict(settings.DB_CONFIG),
        timeout_seconds=int(settings.STORE_TIMEOUT_SECONDS),
    )
    seed_demo_data(store)
    print(f"OK: seeded course {DEMO_COURSE_ID} into the {settings.STORE_BACKEND} store")


if __name__ == "__main__":
    main()
