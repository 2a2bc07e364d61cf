import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

LATE_THRESHOLD_MINUTES = Config.LATE_THRESHOLD_MINUTES
SYSTEM_USER_ID = Config.SYSTEM_USER_ID
BULK_TIMEOUT_SECONDS = Config.BULK_TIMEOUT_SECONDS

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
