"""Load departments and the demo logins (one per role)."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hr_portal.hr_portal.database.bootstrap import DEMO_ACCOUNTS, apply_seed_sql, ensure_demo_users
from src.hr_portal.hr_portal.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_users(db_config)

    print(f"OK: seeded {DBConfig.from_dict(db_config).describe()}")
    for account in DEMO_ACCOUNTS:
        _, email, password, role = account[:4]
        print(f"    {role:<9} {email} / {password}")


if __name__ == "__main__":
    main()
