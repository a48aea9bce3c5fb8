from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.exceptions import ConcurrentModificationError
from .model import TaskAssignment
from .repository import TaskAssignmentRepository


def _sort_key(a: TaskAssignment):
    return (a.sequence, -a.priority, a.assignment_id)


class InMemoryTaskAssignmentRepository(TaskAssignmentRepository):
    def __init__(self, assignments: Iterable[TaskAssignment] = ()):
        self._items: dict[int, TaskAssignment] = {}
        self._lock = threading.Lock()
        for a in assignments:
            self.add(a)

    def get_by_id(self, assignment_id: int) -> Optional[TaskAssignment]:
        with self._lock:
            return self._items.get(int(assignment_id))

    def get_many(self, assignment_ids: Iterable[int]) -> Sequence[TaskAssignment]:
        wanted = {int(i) for i in assignment_ids}
        with self._lock:
            return [a for i, a in self._items.items() if i in wanted]

    def list_for_employee_and_date(
        self, employee_id: int, work_date: date, *, project_id: Optional[int] = None
    ) -> Sequence[TaskAssignment]:
        with self._lock:
            items = [a for a in self._items.values() if a.employee_id == int(employee_id) and a.work_date == work_date]
        if project_id is not None:
            items = [a for a in items if a.project_id == int(project_id)]
        items.sort(key=_sort_key)
        return items

    def add(self, assignment: TaskAssignment) -> TaskAssignment:
        with self._lock:
            if assignment.assignment_id in self._items:
                raise ConcurrentModificationError(f"Assignment {assignment.assignment_id} already exists")
            stored = replace(assignment, version=1)
            self._items[assignment.assignment_id] = stored
            return stored

    def update(self, assignment: TaskAssignment, *, expected_version: int) -> TaskAssignment:
        with self._lock:
            current = self._items.get(assignment.assignment_id)
            if current is None or current.version != expected_version:
                raise ConcurrentModificationError("Task assignment changed since it was read")
            stored = replace(assignment, version=expected_version + 1)
            self._items[assignment.assignment_id] = stored
            return stored
