"""
Tests for the project manager.
"""

import doctest

import pytest

import todomgr.projects as projects_module
from todomgr.errors import (
    AlreadyExistsError,
    CannotDeleteActiveError,
    EmptyInputError,
    NotFoundError,
)
from todomgr.projects import ProjectManager


@pytest.mark.unit
def test_new_manager_has_active_default():
    """
    Ensure a fresh manager starts with the default project active.

    Returns
    -------
    None
        This test asserts initial state.
    """
    manager = ProjectManager()
    assert manager.list() == ["default"]
    assert manager.active_name == "default"
    assert len(manager.active) == 0


@pytest.mark.unit
def test_projects_have_independent_id_counters():
    """
    Ensure each project allocates ids on its own.

    Returns
    -------
    None
        This test asserts repository isolation.
    """
    manager = ProjectManager()
    manager.active.add("a")
    manager.active.add("b")
    manager.create("Work")
    manager.switch("Work")

    assert manager.active.add("c") == 1
    assert len(manager.get("default")) == 2


@pytest.mark.unit
def test_create_rejects_duplicates_and_blank_names():
    """
    Ensure creation validates names; names are case-sensitive.

    Returns
    -------
    None
        This test asserts name validation.
    """
    manager = ProjectManager()
    manager.create("Work")
    manager.create("work")
    with pytest.raises(AlreadyExistsError):
        manager.create("Work")
    with pytest.raises(EmptyInputError):
        manager.create("  ")
    assert manager.list() == ["default", "Work", "work"]


@pytest.mark.unit
def test_switch_unknown_project_keeps_active():
    """
    Ensure switching to a missing project changes nothing.

    Returns
    -------
    None
        This test asserts switch validation.
    """
    manager = ProjectManager()
    with pytest.raises(NotFoundError) as excinfo:
        manager.switch("nowhere")
    assert str(excinfo.value) == "Project 'nowhere' not found."
    assert manager.active_name == "default"


@pytest.mark.unit
def test_delete_rules():
    """
    Ensure the active project cannot be deleted and others can.

    Returns
    -------
    None
        This test asserts deletion rules.
    """
    manager = ProjectManager()
    manager.create("Temp")
    manager.get("Temp").add("x")

    with pytest.raises(CannotDeleteActiveError):
        manager.delete("default")
    with pytest.raises(NotFoundError):
        manager.delete("missing")

    removed = manager.delete("Temp")
    assert len(removed) == 1
    assert manager.list() == ["default"]


@pytest.mark.unit
def test_rename_keeps_position_and_active_state():
    """
    Ensure renaming keeps order, tasks, and the active marker.

    Returns
    -------
    None
        This test asserts project renaming.
    """
    manager = ProjectManager()
    manager.create("A")
    manager.create("B")
    manager.switch("A")
    manager.active.add("task")

    manager.rename("A", "Alpha")

    assert manager.list() == ["default", "Alpha", "B"]
    assert manager.active_name == "Alpha"
    assert len(manager.active) == 1
    with pytest.raises(AlreadyExistsError):
        manager.rename("Alpha", "B")
    with pytest.raises(NotFoundError):
        manager.rename("A", "C")

    assert manager.list() == ["default", "Alpha", "B"]
    assert manager.active_name == "Alpha"
    assert "C" not in manager


@pytest.mark.unit
def test_dict_round_trip_preserves_projects():
    """
    Ensure snapshots restore projects, order, tasks and the active name.

    Returns
    -------
    None
        This test asserts manager serialization.
    """
    manager = ProjectManager()
    manager.active.add("keep me")
    manager.create("Side")
    manager.switch("Side")
    manager.active.add("side task")
    manager.active.remove(1)

    restored = ProjectManager.from_dict(manager.to_dict())

    assert restored.list() == ["default", "Side"]
    assert restored.active_name == "Side"
    assert [task.description for task in restored.get("default").all()] == ["keep me"]
    assert restored.active.next_id == 2


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"projects": []},
        {"projects": [{"tasks": []}]},
        {"projects": [{"name": "a"}, {"name": "a"}]},
    ],
)
@pytest.mark.unit
def test_from_dict_rejects_bad_payloads(payload):
    """
    Ensure malformed snapshots raise ValueError.

    Parameters
    ----------
    payload : object
        Malformed snapshot.

    Returns
    -------
    None
        This test asserts snapshot validation.
    """
    with pytest.raises(ValueError):
        ProjectManager.from_dict(payload)


@pytest.mark.unit
def test_projects_doctest_examples():
    """
    Run doctest examples embedded in the project manager.

    Returns
    -------
    None
        This test asserts doctest coverage for the project manager.
    """
    results = doctest.testmod(projects_module)
    assert results.failed == 0
