import os

from .config import Config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = "DEBUG"

LATE_THRESHOLD_MINUTES = Config.LATE_THRESHOLD_MINUTES
SYSTEM_USER_ID = Config.SYSTEM_USER_ID
BULK_TIMEOUT_SECONDS = Config.BULK_TIMEOUT_SECONDS

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = Config.AUTO_SEED_DB
