from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import load_settings

from src.workforce_payroll.workforce_payroll.database.bootstrap import apply_schema, missing_tables
from src.workforce_payroll.workforce_payroll.database.connection import DBConfig


def main() -> int:
    load_dotenv(override=False)
    settings = load_settings()
    db_config = DBConfig.from_mapping(settings.DB_CONFIG)

    count = apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    missing = missing_tables(db_config)
    if missing:
        print(f"ERROR: {db_config.describe()} is missing tables: {', '.join(missing)}")
        return 1

    print(f"OK: Applied schema.sql -> {db_config.describe()} ({count} statements)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
