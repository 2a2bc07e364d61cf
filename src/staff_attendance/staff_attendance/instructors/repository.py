from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Instructor


class InstructorRoster(Protocol):
    """Read-only roster interface.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    async def list_for_school(self, school_id: Optional[int]) -> Sequence[Instructor]:
        """Instructors of one school, or every instructor when ``school_id`` is None."""

        raise NotImplementedError

    async def get(self, instructor_id: int) -> Optional[Instructor]:
        raise NotImplementedError
