from __future__ import annotations

import importlib
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import get_settings_module

from campus_attendance.store.bootstrap import apply_schema, list_tables
from campus_attendance.store.connection import DatabaseConnection, DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG), timeout_seconds=int(settings.STORE_TIMEOUT_SECONDS))
    conn_factory = DatabaseConnection(config)

    apply_schema(conn_factory)
    tables = list_tables(conn_factory)
    print(f"OK: documents table ready -> {config.user}@{config.host}:{config.port}/{config.database} (tables={len(tables)})")


if __name__ == "__main__":
    main()
