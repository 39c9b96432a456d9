"""
Tests for dependency edges and tree rendering.
"""

import doctest

import pytest

import todomgr.dependencies as dependencies
from todomgr.dependencies import (
    add_dependency,
    can_reach,
    dependencies_completed,
    dependency_tree,
    remove_dependency,
    render_dependency_tree,
)
from todomgr.errors import CycleDetectedError, NotFoundError, SelfDependencyError
from todomgr.repository import TaskRepository


@pytest.fixture
def chain() -> TaskRepository:
    """
    Provide a repository where 1 depends on 2 and 2 depends on 3.

    Returns
    -------
    TaskRepository
        Repository with a three-task chain.
    """
    repo = TaskRepository()
    for description in ("Ship", "Build", "Design"):
        repo.add(description)
    add_dependency(repo, 1, 2)
    add_dependency(repo, 2, 3)
    return repo


@pytest.mark.unit
def test_add_dependency_rejects_self():
    """
    Ensure a task cannot depend on itself.

    Returns
    -------
    None
        This test asserts self-dependency rejection.
    """
    repo = TaskRepository()
    repo.add("Solo")
    with pytest.raises(SelfDependencyError):
        add_dependency(repo, 1, 1)
    assert repo.get(1).dependency_ids == set()


@pytest.mark.parametrize(("task_id", "depends_on_id"), [(3, 1), (2, 1), (3, 2)])
@pytest.mark.unit
def test_add_dependency_rejects_cycles(chain, task_id, depends_on_id):
    """
    Ensure direct and transitive cycles are rejected without mutation.

    Parameters
    ----------
    chain : TaskRepository
        Chain fixture.
    task_id : int
        Dependent task.
    depends_on_id : int
        Proposed prerequisite.

    Returns
    -------
    None
        This test asserts cycle detection.
    """
    before = {task.id: set(task.dependency_ids) for task in chain.all()}

    with pytest.raises(CycleDetectedError) as excinfo:
        add_dependency(chain, task_id, depends_on_id)

    assert excinfo.value.task_id == task_id
    assert excinfo.value.depends_on_id == depends_on_id
    assert {task.id: task.dependency_ids for task in chain.all()} == before


@pytest.mark.unit
def test_add_dependency_requires_both_tasks(chain):
    """
    Ensure unknown ids raise NotFoundError.

    Parameters
    ----------
    chain : TaskRepository
        Chain fixture.

    Returns
    -------
    None
        This test asserts missing-task checks.
    """
    with pytest.raises(NotFoundError):
        add_dependency(chain, 1, 99)
    with pytest.raises(NotFoundError):
        add_dependency(chain, 99, 1)


@pytest.mark.unit
def test_shortcut_edge_is_allowed(chain):
    """
    Ensure redundant but acyclic edges are accepted.

    Parameters
    ----------
    chain : TaskRepository
        Chain fixture.

    Returns
    -------
    None
        This test asserts acyclic edge acceptance.
    """
    add_dependency(chain, 1, 3)
    assert chain.get(1).dependency_ids == {2, 3}
    assert can_reach(chain, 1, 3)


@pytest.mark.unit
def test_remove_dependency_reports_presence(chain):
    """
    Ensure removal returns whether an edge existed.

    Parameters
    ----------
    chain : TaskRepository
        Chain fixture.

    Returns
    -------
    None
        This test asserts edge removal.
    """
    assert remove_dependency(chain, 1, 2) is True
    assert remove_dependency(chain, 1, 2) is False
    with pytest.raises(NotFoundError):
        remove_dependency(chain, 42, 1)


@pytest.mark.unit
def test_dependencies_completed_tracks_prerequisites(chain):
    """
    Ensure a task is unblocked once its direct prerequisites are done.

    Parameters
    ----------
    chain : TaskRepository
        Chain fixture.

    Returns
    -------
    None
        This test asserts blocked-state checks.
    """
    assert not dependencies_completed(chain, 1)
    chain.complete(2)
    assert dependencies_completed(chain, 1)
    assert dependencies_completed(chain, 3)


@pytest.mark.unit
def test_dependency_tree_marks_cycles_in_corrupt_data(chain):
    """
    Ensure an existing cycle is rendered once and marked instead of looping.

    Parameters
    ----------
    chain : TaskRepository
        Chain fixture.

    Returns
    -------
    None
        This test asserts cycle-safe tree expansion.
    """
    chain.get(3).dependency_ids.add(1)

    lines = render_dependency_tree(dependency_tree(chain, 1))

    assert lines == [
        "[1] [ ] Ship",
        "+- [2] [ ] Build",
        "   +- [3] [ ] Design",
        "      +- [1] [ ] Ship (cycle)",
    ]


@pytest.mark.unit
def test_dependency_tree_skips_dangling_edges(chain):
    """
    Ensure edges to missing tasks are ignored.

    Parameters
    ----------
    chain : TaskRepository
        Chain fixture.

    Returns
    -------
    None
        This test asserts dangling edge handling.
    """
    chain.get(1).dependency_ids.add(50)

    node = dependency_tree(chain, 1)

    assert [child.task_id for child in node.children] == [2]


@pytest.mark.unit
def test_dependencies_doctest_examples():
    """
    Run doctest examples embedded in dependency helpers.

    Returns
    -------
    None
        This test asserts doctest coverage for dependency helpers.
    """
    results = doctest.testmod(dependencies)
    assert results.failed == 0
