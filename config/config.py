"""Settings shared by every environment; the env modules override pieces."""

import os


def _bool(name: str, default: str) -> bool:
    return bool(int(os.getenv(name, default)))


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_payroll"),
    "connection_timeout": int(os.getenv("DB_CONNECTION_TIMEOUT", "10")),
    "query_timeout": int(os.getenv("DB_QUERY_TIMEOUT", "30")),
}

# Pay rules; values are parsed as Decimal.
PAYROLL_POLICY = {
    "regular_hours_per_day": os.getenv("PAYROLL_REGULAR_HOURS_PER_DAY", "8"),
    "overtime_multiplier": os.getenv("PAYROLL_OVERTIME_MULTIPLIER", "1.5"),
    "deduction_rate": os.getenv("PAYROLL_DEDUCTION_RATE", "0.15"),
    "daily_hours_equivalent": os.getenv("PAYROLL_DAILY_HOURS_EQUIVALENT", "8"),
}

# Year-end bonus and severance rules; values are parsed as Decimal.
PAYROLL_BENEFITS = {
    "aguinaldo_days": os.getenv("PAYROLL_AGUINALDO_DAYS", "15"),
    "aguinaldo_days_per_service_year": os.getenv("PAYROLL_AGUINALDO_DAYS_PER_SERVICE_YEAR", "0.5"),
    "vacation_bonus_rate": os.getenv("PAYROLL_VACATION_BONUS_RATE", "0.25"),
    "hours_per_day": os.getenv("PAYROLL_REGULAR_HOURS_PER_DAY", "8"),
    "days_per_month": os.getenv("PAYROLL_DAYS_PER_MONTH", "30"),
}

# Weekdays use Python numbering: Monday=0 ... Sunday=6.
PAYROLL_AUTOMATION = {
    "active": _bool("PAYROLL_AUTOMATION_ACTIVE", "1"),
    "cutoff_weekday": int(os.getenv("PAYROLL_CUTOFF_WEEKDAY", "6")),
    "cutoff_time": os.getenv("PAYROLL_CUTOFF_TIME", "23:59"),
    "week_start_weekday": int(os.getenv("PAYROLL_WEEK_START_WEEKDAY", "6")),
    "debounce_seconds": float(os.getenv("PAYROLL_DEBOUNCE_SECONDS", "2")),
    "max_workers": int(os.getenv("PAYROLL_MAX_WORKERS", "8")),
    "retry_attempts": int(os.getenv("PAYROLL_RETRY_ATTEMPTS", "3")),
    "retry_backoff_seconds": float(os.getenv("PAYROLL_RETRY_BACKOFF_SECONDS", "0.5")),
    "reactive_week": os.getenv("PAYROLL_REACTIVE_WEEK", "record"),
    "tick_interval_seconds": int(os.getenv("PAYROLL_TICK_INTERVAL_SECONDS", "30")),
}

REQUIRE_PUNCH_LOCATION = _bool("REQUIRE_PUNCH_LOCATION", "0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
