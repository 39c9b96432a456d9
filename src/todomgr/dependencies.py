"""
Dependency edges between tasks of one repository.

Edges live on the dependent task (``Task.dependency_ids``) and always point
at the task that must be finished first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .errors import CycleDetectedError, SelfDependencyError
from .models import Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)


@dataclass
class DependencyNode:
    """
    One node of an expanded dependency tree.

    Attributes
    ----------
    task_id : int
        Task id for this node.
    task : Optional[Task]
        Task payload, when known.
    children : List[DependencyNode]
        Nodes for the tasks this task depends on.
    cycle : bool
        True when the id already appears on the path from the root; such a
        node is not expanded further.
    """

    task_id: int
    task: Optional[Task]
    children: List["DependencyNode"] = field(default_factory=list)
    cycle: bool = False


def can_reach(repository: TaskRepository, start: int, goal: int) -> bool:
    """
    Return True when ``goal`` is reachable from ``start`` along dependency edges.

    Edges pointing at missing tasks are skipped.

    Examples
    --------
    >>> repo = TaskRepository()
    >>> a, b, c = repo.add("a"), repo.add("b"), repo.add("c")
    >>> add_dependency(repo, a, b)
    >>> add_dependency(repo, b, c)
    >>> can_reach(repo, a, c)
    True
    >>> can_reach(repo, c, a)
    False
    """
    if start == goal:
        return True
    visited: Set[int] = {start}
    stack = [start]
    while stack:
        current = repository.get(stack.pop())
        if current is None:
            continue
        for next_id in current.dependency_ids:
            if next_id == goal:
                return True
            if next_id in visited or next_id not in repository:
                continue
            visited.add(next_id)
            stack.append(next_id)
    return False


def add_dependency(repository: TaskRepository, task_id: int, depends_on_id: int) -> None:
    """
    Record that ``task_id`` depends on ``depends_on_id``.

    Parameters
    ----------
    repository : TaskRepository
        Repository owning both tasks.
    task_id : int
        Dependent task.
    depends_on_id : int
        Task that must be completed first.

    Raises
    ------
    NotFoundError
        If either task does not exist.
    SelfDependencyError
        If both ids are the same.
    CycleDetectedError
        If ``depends_on_id`` already depends on ``task_id``, directly or
        transitively.
    """
    task = repository.require(task_id)
    repository.require(depends_on_id)
    if task_id == depends_on_id:
        raise SelfDependencyError(task_id)
    if can_reach(repository, depends_on_id, task_id):
        raise CycleDetectedError(task_id, depends_on_id)
    task.dependency_ids.add(depends_on_id)
    logger.debug("task %d now depends on task %d", task_id, depends_on_id)


def remove_dependency(repository: TaskRepository, task_id: int, depends_on_id: int) -> bool:
    """
    Drop a dependency edge.

    Returns
    -------
    bool
        True when an edge was removed, False when there was none.

    Raises
    ------
    NotFoundError
        If ``task_id`` does not exist.
    """
    task = repository.require(task_id)
    if depends_on_id not in task.dependency_ids:
        return False
    task.dependency_ids.discard(depends_on_id)
    logger.debug("task %d no longer depends on task %d", task_id, depends_on_id)
    return True


def dependencies_completed(repository: TaskRepository, task_id: int) -> bool:
    task = repository.require(task_id)
    for dep_id in task.dependency_ids:
        dep = repository.get(dep_id)
        if dep is not None and not dep.completed:
            return False
    return True


def dependency_tree(repository: TaskRepository, task_id: int) -> DependencyNode:
    """
    Expand the dependencies of a task into a tree.

    Parameters
    ----------
    repository : TaskRepository
        Repository owning the task.
    task_id : int
        Root of the tree.

    Returns
    -------
    DependencyNode
        Root node; children are sorted by id.

    Raises
    ------
    NotFoundError
        If the root task does not exist.
    """
    root = repository.require(task_id)

    def expand(task: Task, path: Set[int]) -> DependencyNode:
        node = DependencyNode(task_id=task.id, task=task)
        for dep_id in sorted(task.dependency_ids):
            dep = repository.get(dep_id)
            if dep is None:
                continue
            if dep_id in path:
                node.children.append(DependencyNode(task_id=dep_id, task=dep, cycle=True))
                continue
            node.children.append(expand(dep, path | {dep_id}))
        return node

    return expand(root, {root.id})


def build_tree_prefix(ancestor_has_more: List[bool]) -> str:
    parts = []
    for has_more in ancestor_has_more:
        parts.append("|  " if has_more else "   ")
    parts.append("+- ")
    return "".join(parts)


def _node_label(node: DependencyNode) -> str:
    if node.task is None:
        return f"[{node.task_id}]"
    marker = "x" if node.task.completed else " "
    return f"[{node.task_id}] [{marker}] {node.task.description}"


def render_dependency_tree(node: DependencyNode) -> List[str]:
    """
    Render a dependency tree as ASCII lines.

    Examples
    --------
    >>> repo = TaskRepository()
    >>> a, b, c = repo.add("Deploy"), repo.add("Build"), repo.add("Test")
    >>> add_dependency(repo, a, b)
    >>> add_dependency(repo, a, c)
    >>> for line in render_dependency_tree(dependency_tree(repo, a)):
    ...     print(line)
    [1] [ ] Deploy
    +- [2] [ ] Build
    +- [3] [ ] Test
    """
    lines = [_node_label(node)]

    def walk(current: DependencyNode, ancestor_has_more: List[bool]) -> None:
        for index, child in enumerate(current.children):
            has_more = index < len(current.children) - 1
            label = _node_label(child)
            if child.cycle:
                label = f"{label} (cycle)"
            lines.append(f"{build_tree_prefix(ancestor_has_more)}{label}")
            walk(child, [*ancestor_has_more, has_more])

    walk(node, [])
    return lines
