from __future__ import annotations

from typing import Iterable, Optional

from .model import Project
from .repository import ProjectRepository


class InMemoryProjectRepository(ProjectRepository):
    def __init__(self, projects: Iterable[Project] = ()):
        self._projects: dict[int, Project] = {p.project_id: p for p in projects}

    def add(self, project: Project) -> None:
        self._projects[project.project_id] = project

    def get_by_id(self, project_id: int) -> Optional[Project]:
        return self._projects.get(int(project_id))
