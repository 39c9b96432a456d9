"""
Named projects, each with its own task repository.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import AlreadyExistsError, CannotDeleteActiveError, EmptyInputError, NotFoundError
from .repository import TaskRepository

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "default"


class ProjectManager:
    """
    Map project names to repositories and track the active project.

    The mapping is never empty and the active project always exists. Names
    are case-sensitive and listed in creation order.

    Examples
    --------
    >>> manager = ProjectManager()
    >>> manager.create("Work")
    >>> manager.switch("Work")
    >>> manager.list()
    ['default', 'Work']
    >>> manager.active_name
    'Work'
    """

    def __init__(self, default_name: str = DEFAULT_PROJECT_NAME) -> None:
        self._projects: Dict[str, TaskRepository] = {default_name: TaskRepository()}
        self._active = default_name

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, name: object) -> bool:
        return name in self._projects

    @property
    def active_name(self) -> str:
        return self._active

    @property
    def active(self) -> TaskRepository:
        return self._projects[self._active]

    def get(self, name: str) -> Optional[TaskRepository]:
        return self._projects.get(name)

    def list(self) -> List[str]:
        return list(self._projects)

    def create(self, name: str) -> None:
        if not name or not name.strip():
            raise EmptyInputError("Project name")
        if name in self._projects:
            raise AlreadyExistsError(name)
        self._projects[name] = TaskRepository()
        logger.debug("created project %r", name)

    def switch(self, name: str) -> None:
        if name not in self._projects:
            raise NotFoundError("project", name)
        self._active = name
        logger.debug("switched to project %r", name)

    def delete(self, name: str) -> TaskRepository:
        """
        Delete a project that is not active.

        Returns
        -------
        TaskRepository
            Repository of the deleted project.

        Raises
        ------
        NotFoundError
            If the project does not exist.
        CannotDeleteActiveError
            If the project is the active one.
        """
        if name not in self._projects:
            raise NotFoundError("project", name)
        if name == self._active:
            raise CannotDeleteActiveError(name)
        logger.debug("deleted project %r", name)
        return self._projects.pop(name)

    def rename(self, old_name: str, new_name: str) -> None:
        """
        Rename a project in place, keeping its position and active state.

        Raises
        ------
        NotFoundError
            If ``old_name`` does not exist.
        AlreadyExistsError
            If ``new_name`` is already taken.
        EmptyInputError
            If ``new_name`` is blank.
        """
        if old_name not in self._projects:
            raise NotFoundError("project", old_name)
        if not new_name or not new_name.strip():
            raise EmptyInputError("Project name")
        if new_name in self._projects:
            raise AlreadyExistsError(new_name)
        self._projects = {
            (new_name if name == old_name else name): repository
            for name, repository in self._projects.items()
        }
        if self._active == old_name:
            self._active = new_name
        logger.debug("renamed project %r to %r", old_name, new_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active": self._active,
            "projects": [
                {"name": name, **repository.to_dict()}
                for name, repository in self._projects.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectManager":
        """
        Restore a manager snapshot.

        Raises
        ------
        ValueError
            If the payload has no projects, duplicate names, or bad tasks.
        """
        if not isinstance(data, dict):
            raise ValueError(f"invalid project payload: {data!r}")
        entries = data.get("projects") or []
        projects: Dict[str, TaskRepository] = {}
        for entry in entries:
            name = entry.get("name") if isinstance(entry, dict) else None
            if not name:
                raise ValueError(f"project entry without a name: {entry!r}")
            if name in projects:
                raise ValueError(f"duplicate project name {name!r}")
            projects[name] = TaskRepository.from_dict(entry)
        if not projects:
            raise ValueError("snapshot contains no projects")

        manager = cls()
        manager._projects = projects
        active = data.get("active")
        manager._active = active if active in projects else next(iter(projects))
        return manager
