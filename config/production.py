import os

from .config import DB_CONFIG, LOG_LEVEL, PAYROLL_AUTOMATION, PAYROLL_BENEFITS, PAYROLL_POLICY, _bool

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

AUTO_INIT_DB = _bool("AUTO_INIT_DB", "0")
AUTO_START_SCHEDULER = _bool("AUTO_START_SCHEDULER", "1")
REQUIRE_PUNCH_LOCATION = _bool("REQUIRE_PUNCH_LOCATION", "1")
