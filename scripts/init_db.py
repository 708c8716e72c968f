"""Create the HR portal tables in the configured database (APP_ENV picks the settings)."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hr_portal.hr_portal.database.bootstrap import apply_schema, list_tables
from src.hr_portal.hr_portal.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = sorted(list_tables(db_config))
    print(f"OK: schema applied to {DBConfig.from_dict(db_config).describe()}")
    print(f"    {len(tables)} tables: {', '.join(tables)}")


if __name__ == "__main__":
    main()
