import os

from .config import DB_CONFIG, PAYROLL_AUTOMATION, PAYROLL_BENEFITS, PAYROLL_POLICY, REQUIRE_PUNCH_LOCATION, _bool

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _bool("AUTO_INIT_DB", "1")
AUTO_START_SCHEDULER = _bool("AUTO_START_SCHEDULER", "1")
