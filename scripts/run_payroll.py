"""Recalculate one week's payroll for every active employee, outside Flask.

Usage: python scripts/run_payroll.py [YYYY-MM-DD]

Any date inside the week works; it is normalized to the week's start.
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import load_settings

from src.workforce_payroll.workforce_payroll.common.datetime_utils import parse_iso_date
from src.workforce_payroll.workforce_payroll.common.logging_config import configure_logging
from src.workforce_payroll.workforce_payroll.container import build_container
from src.workforce_payroll.workforce_payroll.core.actor import SYSTEM_ACTOR
from src.workforce_payroll.workforce_payroll.payroll.week import Week


def main(argv: list[str]) -> int:
    load_dotenv(override=False)
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=settings.DB_CONFIG,
        payroll_policy=getattr(settings, "PAYROLL_POLICY", None),
        automation=getattr(settings, "PAYROLL_AUTOMATION", None),
    )
    scheduler = container.payroll_scheduler

    week_start = None
    if argv:
        week_start = Week.containing(parse_iso_date(argv[0]), scheduler.config.week_start_weekday).start

    result = scheduler.recalculate_all(SYSTEM_ACTOR, week_start=week_start)
    print(
        f"week {result.week_start.isoformat()}: attempted={result.attempted} "
        f"succeeded={result.succeeded} failed={list(result.failed)}"
    )
    summary = scheduler.latest_summary
    if summary is not None:
        print(f"total payroll {summary.total_payroll} ({summary.processed_count}/{summary.total_employees} processed)")
    return 1 if result.has_failures else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
