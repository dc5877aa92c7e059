from .config import DB_CONFIG, PAYROLL_BENEFITS, PAYROLL_POLICY, _bool

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = _bool("AUTO_INIT_DB", "0")
AUTO_START_SCHEDULER = False
REQUIRE_PUNCH_LOCATION = False

# No real timers in tests: zero debounce, single worker, no backoff.
PAYROLL_AUTOMATION = {
    "active": True,
    "debounce_seconds": 0.0,
    "max_workers": 1,
    "retry_attempts": 1,
    "retry_backoff_seconds": 0.0,
}
