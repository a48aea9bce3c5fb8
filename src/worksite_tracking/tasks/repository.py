from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from .model import TaskAssignment


class TaskAssignmentRepository(Protocol):
    """Persistence port for task assignments (same version rules as attendance)."""

    def get_by_id(self, assignment_id: int) -> Optional[TaskAssignment]:
        raise NotImplementedError

    def get_many(self, assignment_ids: Iterable[int]) -> Sequence[TaskAssignment]:
        raise NotImplementedError

    def list_for_employee_and_date(
        self, employee_id: int, work_date: date, *, project_id: Optional[int] = None
    ) -> Sequence[TaskAssignment]:
        """Assignments of the day ordered by (sequence, priority desc, id)."""

        raise NotImplementedError

    def add(self, assignment: TaskAssignment) -> TaskAssignment:
        raise NotImplementedError

    def update(self, assignment: TaskAssignment, *, expected_version: int) -> TaskAssignment:
        raise NotImplementedError
