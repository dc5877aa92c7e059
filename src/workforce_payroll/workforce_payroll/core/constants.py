"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

REGULAR_HOURS_PER_DAY = Decimal("8")
OVERTIME_MULTIPLIER = Decimal("1.5")
DEDUCTION_RATE = Decimal("0.15")
DAILY_HOURS_EQUIVALENT = Decimal("8")

# Year-end bonus (aguinaldo) and severance (finiquito)
AGUINALDO_DAYS = Decimal("15")
AGUINALDO_DAYS_PER_SERVICE_YEAR = Decimal("0.5")
VACATION_BONUS_RATE = Decimal("0.25")
DAYS_PER_MONTH = Decimal("30")

# Python weekday numbering: Monday=0 ... Sunday=6
SUNDAY = 6
DEFAULT_WEEK_START_WEEKDAY = SUNDAY
DEFAULT_CUTOFF_WEEKDAY = SUNDAY
DEFAULT_CUTOFF_TIME = time(23, 59)

DEFAULT_DEBOUNCE_SECONDS = 2.0
DEFAULT_MAX_WORKERS = 8
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BACKOFF_SECONDS = 0.5
DEFAULT_TICK_INTERVAL_SECONDS = 30

ACTIVITY_MODULE_PAYROLL = "Payroll Automation"
