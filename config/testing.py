from .config import Config

SECRET_KEY = "test-secret"
DB_CONFIG = Config.db_config()

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

LATE_THRESHOLD_MINUTES = 420
SYSTEM_USER_ID = 1
BULK_TIMEOUT_SECONDS = 5.0

AUTO_INIT_DB = False
AUTO_SEED_DB = False
