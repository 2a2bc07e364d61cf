from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector

from ..core.exceptions import StoreUnavailableError, ValidationError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate connector failures into domain errors.

    Rows the server refuses (unknown instructor, out-of-range value) are
    ValidationError; anything else means the store is unavailable.
    """

    try:
        yield
    except (mysql.connector.IntegrityError, mysql.connector.DataError) as exc:
        logger.warning("MySQL rejected data during %s: %s", action, exc)
        raise ValidationError(f"Attendance store rejected the data to {action}") from exc
    except mysql.connector.Error as exc:
        logger.exception("MySQL error during %s", action)
        raise StoreUnavailableError(f"Attendance store failed to {action}") from exc


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def clock_text(value: Any) -> Optional[str]:
    """Normalize a stored clock value to HH:MM.

    mysql-connector can return clock columns as:
    - datetime.time (TIME with the C extension)
    - datetime.timedelta (TIME with the pure connector)
    - string (VARCHAR columns, e.g. '08:30' or '08:30:00')
    """

    if value is None or value == "":
        return None

    if isinstance(value, time):
        return value.strftime("%H:%M")

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return f"{total_seconds // 3600:02d}:{(total_seconds % 3600) // 60:02d}"

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) >= 2:
            return f"{parts[0].zfill(2)}:{parts[1].zfill(2)}"
        # Left as-is; the classifier reports malformed times.
        return value.strip()

    raise TypeError(f"Unsupported MySQL clock value type: {type(value)!r}")
