import os


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


class Config:
    """Values shared by every environment; the per-environment modules override them."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "change-me"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = _env_int("DB_PORT", 3306)
    DB_NAME = os.environ.get("DB_NAME", "staff_attendance")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Check-ins after this many minutes past midnight are recorded as late (07:00).
    LATE_THRESHOLD_MINUTES = _env_int("LATE_THRESHOLD_MINUTES", 420)
    SYSTEM_USER_ID = _env_int("SYSTEM_USER_ID", 1)
    BULK_TIMEOUT_SECONDS = float(os.environ.get("BULK_TIMEOUT_SECONDS", "30"))

    AUTO_INIT_DB = _env_flag("AUTO_INIT_DB")
    # Only read when AUTO_INIT_DB is on.
    AUTO_SEED_DB = _env_flag("AUTO_SEED_DB")

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
