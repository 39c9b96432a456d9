"""
In-memory task storage for a single project.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterator, List, Optional

from .errors import EmptyInputError, NotFoundError
from .models import Priority, Recurrence, Task

logger = logging.getLogger(__name__)


class TaskRepository:
    """
    Own every task of one project and allocate their ids.

    Ids come from a monotonic counter that is never decremented, not even by
    ``clear_all``, so an id is never handed out twice.

    Examples
    --------
    >>> repo = TaskRepository()
    >>> repo.add("Write tests")
    1
    >>> repo.add_subtask(1, "Cover edge cases")
    2
    >>> [task.id for task in repo.remove(1)]
    [1, 2]
    >>> repo.add("Ship it")
    3
    """

    def __init__(self, next_id: int = 1) -> None:
        self._tasks: Dict[int, Task] = {}
        self._next_id = max(1, next_id)

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self.all())

    def _allocate(self, description: str, parent_id: Optional[int] = None) -> Task:
        if not description or not description.strip():
            raise EmptyInputError("Task description")
        task = Task(id=self._next_id, description=description.strip(), parent_id=parent_id)
        self._tasks[task.id] = task
        self._next_id += 1
        logger.debug("added task %d (parent=%s)", task.id, parent_id)
        return task

    def add(self, description: str) -> int:
        return self._allocate(description).id

    def add_subtask(self, parent_id: int, description: str) -> int:
        """
        Add a subtask under an existing task.

        Parameters
        ----------
        parent_id : int
            Id of the parent task.
        description : str
            Subtask description.

        Returns
        -------
        int
            Id of the new subtask.

        Raises
        ------
        NotFoundError
            If the parent does not exist.
        """
        self.require(parent_id)
        return self._allocate(description, parent_id=parent_id).id

    def get(self, task_id: int) -> Optional[Task]:
        return self._tasks.get(task_id)

    def require(self, task_id: int) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        return task

    def all(self) -> List[Task]:
        return [self._tasks[task_id] for task_id in sorted(self._tasks)]

    def subtasks(self, parent_id: int) -> List[Task]:
        return [task for task in self.all() if task.parent_id == parent_id]

    def descendant_ids(self, task_id: int) -> List[int]:
        """
        Return ids of all subtasks below a task, transitively.

        The walk tracks visited ids so a corrupted parent chain cannot loop.
        """
        found: List[int] = []
        visited = {task_id}
        frontier = [task_id]
        while frontier:
            current = frontier.pop()
            for task in self._tasks.values():
                if task.parent_id == current and task.id not in visited:
                    visited.add(task.id)
                    found.append(task.id)
                    frontier.append(task.id)
        return sorted(found)

    def remove(self, task_id: int) -> List[Task]:
        """
        Remove a task together with all of its subtasks.

        Every removed id is also stripped from the dependency sets of the
        remaining tasks.

        Parameters
        ----------
        task_id : int
            Id of the task to remove.

        Returns
        -------
        List[Task]
            Removed tasks, the requested task first.

        Raises
        ------
        NotFoundError
            If the task does not exist.
        """
        task = self.require(task_id)
        doomed = [task_id, *self.descendant_ids(task_id)]
        removed = [task]
        for doomed_id in doomed[1:]:
            removed.append(self._tasks[doomed_id])
        for doomed_id in doomed:
            del self._tasks[doomed_id]
        doomed_set = set(doomed)
        for remaining in self._tasks.values():
            remaining.dependency_ids -= doomed_set
        logger.debug("removed tasks %s", doomed)
        return removed

    def toggle(self, task_id: int) -> Task:
        task = self.require(task_id)
        task.completed = not task.completed
        return task

    def complete(self, task_id: int) -> Task:
        task = self.require(task_id)
        task.completed = True
        return task

    def uncomplete(self, task_id: int) -> Task:
        task = self.require(task_id)
        task.completed = False
        return task

    def edit(self, task_id: int, description: str) -> Task:
        if not description or not description.strip():
            raise EmptyInputError("Task description")
        task = self.require(task_id)
        task.description = description.strip()
        return task

    def set_priority(self, task_id: int, priority: Optional[Priority]) -> Task:
        task = self.require(task_id)
        task.priority = priority
        return task

    def set_due_date(self, task_id: int, due_date: Optional[date]) -> Task:
        task = self.require(task_id)
        task.due_date = due_date
        return task

    def set_category(self, task_id: int, category: Optional[str]) -> Task:
        task = self.require(task_id)
        task.category = category
        return task

    def set_recurrence(self, task_id: int, recurrence: Optional[Recurrence]) -> Task:
        task = self.require(task_id)
        task.recurrence = recurrence
        return task

    def clear_all(self) -> int:
        count = len(self._tasks)
        self._tasks.clear()
        logger.debug("cleared %d tasks; next id stays %d", count, self._next_id)
        return count

    def search(self, keyword: str) -> List[Task]:
        """
        Return tasks whose description contains the keyword, ignoring case.

        Examples
        --------
        >>> repo = TaskRepository()
        >>> _ = repo.add("Buy milk")
        >>> _ = repo.add("Read a book")
        >>> [task.description for task in repo.search("BUY")]
        ['Buy milk']
        """
        needle = keyword.lower()
        return [task for task in self.all() if needle in task.description.lower()]

    def categories(self) -> List[str]:
        return sorted({task.category for task in self._tasks.values() if task.category})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "next_id": self._next_id,
            "tasks": [task.to_dict() for task in self.all()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskRepository":
        """
        Restore a repository snapshot.

        The counter is raised above the largest stored id if the snapshot
        carries a stale value.

        Raises
        ------
        ValueError
            If the payload is malformed or contains duplicate ids.
        """
        if not isinstance(data, dict):
            raise ValueError(f"invalid repository payload: {data!r}")
        tasks = [Task.from_dict(item) for item in data.get("tasks") or []]
        highest = max((task.id for task in tasks), default=0)
        repository = cls(next_id=max(int(data.get("next_id") or 1), highest + 1))
        for task in tasks:
            if task.id in repository._tasks:
                raise ValueError(f"duplicate task id {task.id}")
            repository._tasks[task.id] = task
        return repository
