from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Instructor:
    """Domain entity: an instructor on a school roster.

    Owned by the instructor CRUD screens; the attendance engine only reads it.
    """

    instructor_id: int
    name: str
    school_id: Optional[int]
    nationality: Optional[str] = None
    role: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.instructor_id,
            "name": self.name,
            "schoolId": self.school_id,
            "nationality": self.nationality,
            "role": self.role,
        }
