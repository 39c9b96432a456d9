"""
Task verbs: parsing their arguments and applying them to the active project.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from .commands import (
    CommandController,
    DispatchContext,
    DispatchOutcome,
    Message,
    error,
    info,
    success,
)
from .dependencies import (
    add_dependency,
    dependencies_completed,
    dependency_tree,
    remove_dependency,
    render_dependency_tree,
)
from .errors import (
    EmptyInputError,
    InvalidDateError,
    InvalidFormatError,
    InvalidValueError,
    MissingArgumentsError,
)
from .filtering import ListQuery, parse_list_arguments, run_query
from .models import Priority, Recurrence, Task
from .output import format_date, format_task_hierarchy, format_task_list
from .repository import TaskRepository
from .selection import TaskSelection, dispatch, parse_selection
from .statistics import compute_statistics, format_statistics

logger = logging.getLogger(__name__)

CLEAR_WORDS = ("none", "clear")
DATE_USAGE = "DD.MM.YYYY (e.g., 31.12.2024)"


def parse_task_id(text: str, field: str = "task ID") -> int:
    """
    Parse a positive task id.

    Examples
    --------
    >>> parse_task_id("12")
    12
    >>> parse_task_id("x")
    Traceback (most recent call last):
    ...
    todomgr.errors.InvalidFormatError: Invalid task ID format. Expected: positive integer, got: x
    """
    value = text.strip()
    if not value.isdecimal() or int(value) < 1:
        raise InvalidFormatError(field, "positive integer", text)
    return int(value)


def parse_due_date(text: str) -> date:
    """
    Parse a due date in ``DD.MM.YYYY`` or ISO ``YYYY-MM-DD`` form.

    Raises
    ------
    InvalidFormatError
        If the text matches neither layout.
    InvalidDateError
        If the layout matches but the calendar date does not exist.

    Examples
    --------
    >>> parse_due_date("31.12.2024")
    datetime.date(2024, 12, 31)
    >>> parse_due_date("2024-02-29")
    datetime.date(2024, 2, 29)
    >>> parse_due_date("30.02.2024")
    Traceback (most recent call last):
    ...
    todomgr.errors.InvalidDateError: Invalid date. Please check the date is valid.
    """
    value = text.strip()
    if "." in value:
        parts = value.split(".")
        order = (2, 1, 0)
    else:
        parts = value.split("-")
        order = (0, 1, 2)
    if len(parts) != 3 or not all(part.isdecimal() for part in parts):
        raise InvalidFormatError("date", DATE_USAGE, text)
    year, month, day = (int(parts[index]) for index in order)
    try:
        return date(year, month, day)
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError("Invalid date. Please check the date is valid.") from exc


def _is_clear(text: str) -> bool:
    return text.strip().lower() in CLEAR_WORDS


def _selection_parser(command: str) -> Callable[[Sequence[str]], Tuple[TaskSelection]]:
    def parse(args: Sequence[str]) -> Tuple[TaskSelection]:
        if not args:
            raise MissingArgumentsError(command, f"{command} <task id|range|all>")
        return (parse_selection(args[0], command),)

    return parse


def parse_add(args: Sequence[str]) -> Tuple[str]:
    if not args:
        raise MissingArgumentsError("add", "add <task description>")
    description = " ".join(args).strip()
    if not description:
        raise EmptyInputError("Task description")
    return (description,)


def parse_add_subtask(args: Sequence[str]) -> Tuple[int, str]:
    usage = "add-subtask <parent_id> <subtask description>"
    if len(args) < 2:
        raise MissingArgumentsError("add-subtask", usage)
    parent_id = parse_task_id(args[0], "parent_id")
    description = " ".join(args[1:]).strip()
    if not description:
        raise EmptyInputError("Subtask description")
    return parent_id, description


def parse_list(args: Sequence[str]) -> Tuple[ListQuery]:
    return (parse_list_arguments(args),)


def parse_priority(args: Sequence[str]) -> Tuple[TaskSelection, Optional[Priority]]:
    usage = "priority <task id|range|all> <priority level (high/h, medium/med/m, low/l)>"
    if len(args) < 2:
        raise MissingArgumentsError("priority", usage)
    if _is_clear(args[1]):
        level = None
    else:
        level = Priority.parse(args[1])
        if level is None:
            raise InvalidValueError("priority level", args[1], "high/h, medium/med/m, or low/l")
    return parse_selection(args[0], "priority"), level


def parse_due(args: Sequence[str]) -> Tuple[int, Optional[date]]:
    if len(args) < 2:
        raise MissingArgumentsError(
            "due", "due <task id> <date (DD.MM.YYYY) or 'none' to clear>"
        )
    task_id = parse_task_id(args[0])
    due_date = None if _is_clear(args[1]) else parse_due_date(args[1])
    return task_id, due_date


def parse_edit(args: Sequence[str]) -> Tuple[int, str]:
    if len(args) < 2:
        raise MissingArgumentsError("edit", "edit <task id> <new description>")
    task_id = parse_task_id(args[0])
    description = " ".join(args[1:]).strip()
    if not description:
        raise EmptyInputError("Task description")
    return task_id, description


def parse_category(args: Sequence[str]) -> Tuple[TaskSelection, Optional[str]]:
    if len(args) < 2:
        raise MissingArgumentsError(
            "category", "category <task id|range|all> <category name or 'none' to clear>"
        )
    name = " ".join(args[1:]).strip()
    if not name:
        raise EmptyInputError("Category name")
    category = None if _is_clear(name) else name
    return parse_selection(args[0], "category"), category


def parse_recurring(args: Sequence[str]) -> Tuple[TaskSelection, Optional[Recurrence]]:
    if len(args) < 2:
        raise MissingArgumentsError(
            "recurring", "recurring <task id|range|all> <daily|weekly|monthly|none>"
        )
    if _is_clear(args[1]):
        recurrence = None
    else:
        recurrence = Recurrence.parse(args[1])
        if recurrence is None:
            raise InvalidFormatError("recurrence", "daily, weekly, monthly, or none", args[1])
    return parse_selection(args[0], "recurring"), recurrence


def _dependency_parser(command: str) -> Callable[[Sequence[str]], Tuple[int, int]]:
    def parse(args: Sequence[str]) -> Tuple[int, int]:
        if len(args) < 2:
            raise MissingArgumentsError(command, f"{command} <task_id> <depends_on_id>")
        return parse_task_id(args[0]), parse_task_id(args[1], "dependency ID")

    return parse


def parse_graph(args: Sequence[str]) -> Tuple[int]:
    if not args:
        raise MissingArgumentsError("graph", "graph <task_id>")
    return (parse_task_id(args[0]),)


def parse_search(args: Sequence[str]) -> Tuple[str]:
    keyword = " ".join(args).strip()
    if not args:
        raise MissingArgumentsError("search", "search <keyword>")
    if not keyword:
        raise EmptyInputError("Search keyword")
    return (keyword,)


def create_next_occurrence(repository: TaskRepository, task: Task, today: date) -> int:
    """
    Add the next occurrence of a recurring task.

    The copy keeps description, priority, category, parent and recurrence;
    its due date is advanced from the old due date (or ``today``), and every
    direct subtask is copied as a fresh pending subtask.

    Parameters
    ----------
    repository : TaskRepository
        Repository holding ``task``.
    task : Task
        Recurring task that was just completed.
    today : date
        Base date when the task has no due date.

    Returns
    -------
    int
        Id of the new task.
    """
    if task.recurrence is None:
        raise ValueError(f"task {task.id} is not recurring")
    if task.parent_id is not None and task.parent_id in repository:
        new_id = repository.add_subtask(task.parent_id, task.description)
    else:
        new_id = repository.add(task.description)
    copy = repository.require(new_id)
    copy.priority = task.priority
    copy.category = task.category
    copy.recurrence = task.recurrence
    copy.due_date = task.recurrence.next_due_date(task.due_date or today)
    for subtask in repository.subtasks(task.id):
        subtask_id = repository.add_subtask(new_id, subtask.description)
        repository.set_priority(subtask_id, subtask.priority)
    logger.debug("task %d recurs as task %d due %s", task.id, new_id, copy.due_date)
    return new_id


def _count(count: int, noun: str = "task") -> str:
    return f"1 {noun}" if count == 1 else f"{count} {noun}s"


def _missing_message(missing: List[int]) -> List[Message]:
    if not missing:
        return []
    ids = ", ".join(str(task_id) for task_id in missing)
    return [error(f"Tasks with IDs {ids} not found.")]


class TaskCommandController(CommandController):
    """
    Own the task verbs and apply them to the active project's repository.
    """

    name = "task"

    def __init__(self) -> None:
        super().__init__()
        self.register("add", self.do_add, parse_add)
        self.register("add-subtask", self.do_add_subtask, parse_add_subtask, ("subtask",))
        self.register("list", self.do_list, parse_list, ("ls",))
        self.register("remove", self.do_remove, _selection_parser("remove"), ("delete", "rm"))
        self.register("complete", self.do_complete, _selection_parser("complete"), ("done",))
        self.register(
            "uncomplete", self.do_uncomplete, _selection_parser("uncomplete"), ("undo",)
        )
        self.register("toggle", self.do_toggle, _selection_parser("toggle"))
        self.register("priority", self.do_priority, parse_priority, ("pri",))
        self.register("due", self.do_due, parse_due, ("set-due",))
        self.register("edit", self.do_edit, parse_edit)
        self.register(
            "category", self.do_category, parse_category, ("cat", "set-category")
        )
        self.register(
            "recurring", self.do_recurring, parse_recurring, ("recur", "set-recurring")
        )
        self.register(
            "depend",
            self.do_depend,
            _dependency_parser("depend"),
            ("add-dependency", "add-dep", "depends-on"),
        )
        self.register(
            "undepend",
            self.do_undepend,
            _dependency_parser("undepend"),
            ("remove-dependency", "remove-dep", "rm-dep"),
        )
        self.register(
            "graph",
            self.do_graph,
            parse_graph,
            ("deps", "dependencies", "show-dependencies", "dep-graph", "dependency-graph"),
        )
        self.register("categories", self.do_categories, aliases=("list-categories",))
        self.register("search", self.do_search, parse_search, ("find",))
        self.register("stats", self.do_stats, aliases=("statistics",))

    def _apply_each(
        self,
        repository: TaskRepository,
        task_ids: Sequence[int],
        apply: Callable[[int], None],
    ) -> Tuple[int, List[int]]:
        affected = 0
        missing: List[int] = []
        for task_id in task_ids:
            if task_id not in repository:
                missing.append(task_id)
                continue
            apply(task_id)
            affected += 1
        return affected, missing

    def _bulk(
        self,
        context: DispatchContext,
        selection: TaskSelection,
        on_single: Callable[[Task], List[Message]],
        apply: Callable[[int], None],
        summary: Callable[[int, bool], str],
        nothing: str,
    ) -> DispatchOutcome:
        """
        Apply one mutation to a selection.

        A single id that does not exist raises ``NotFoundError``; multiple
        and all selections report the affected count and any missing ids.
        """
        repository = context.repository

        def single(task_id: int) -> List[Message]:
            task = repository.require(task_id)
            return on_single(task)

        def report(affected: int, missing: List[int], all_selected: bool) -> List[Message]:
            messages = [success(summary(affected, all_selected))] if affected else [info(nothing)]
            return messages + _missing_message(missing)

        def multiple(task_ids: List[int]) -> List[Message]:
            affected, missing = self._apply_each(repository, task_ids, apply)
            return report(affected, missing, False)

        def everything() -> List[Message]:
            ids = [task.id for task in repository.all()]
            affected, _ = self._apply_each(repository, ids, apply)
            return report(affected, [], True)

        return DispatchOutcome.saved(dispatch(selection, single, multiple, everything))

    def do_add(self, context: DispatchContext, description: str) -> DispatchOutcome:
        task_id = context.repository.add(description)
        return DispatchOutcome.saved(
            [success(f"Task added with ID {task_id}: '{description}'")]
        )

    def do_add_subtask(
        self, context: DispatchContext, parent_id: int, description: str
    ) -> DispatchOutcome:
        task_id = context.repository.add_subtask(parent_id, description)
        return DispatchOutcome.saved(
            [
                success(
                    f"Subtask added with ID {task_id} under parent task {parent_id}: "
                    f"'{description}'"
                )
            ]
        )

    def do_list(self, context: DispatchContext, query: ListQuery) -> DispatchOutcome:
        today = context.current_date()
        tasks = context.repository.all()
        if not tasks:
            return DispatchOutcome.build(
                [info("No tasks found. Use 'add <description>' to create a task.")]
            )
        if query.is_default:
            lines = format_task_hierarchy(tasks, today)
        else:
            selected = run_query(tasks, query, today)
            if not selected:
                return DispatchOutcome.build([info("No tasks match the given filters.")])
            lines = format_task_list(selected, today)
        return DispatchOutcome.build(info(line) for line in lines)

    def do_remove(self, context: DispatchContext, selection: TaskSelection) -> DispatchOutcome:
        repository = context.repository
        removed_ids: set = set()

        def on_single(task: Task) -> List[Message]:
            removed = repository.remove(task.id)
            text = f"Task removed: '{task.description}'"
            if len(removed) > 1:
                text = f"{text} (and {_count(len(removed) - 1, 'subtask')})"
            return [success(text)]

        def multiple(task_ids: List[int]) -> List[Message]:
            missing = []
            for task_id in task_ids:
                if task_id in removed_ids:
                    continue
                if task_id not in repository:
                    missing.append(task_id)
                    continue
                removed_ids.update(task.id for task in repository.remove(task_id))
            messages = (
                [success(f"Removed {_count(len(removed_ids))}.")]
                if removed_ids
                else [info("No tasks to remove.")]
            )
            return messages + _missing_message(missing)

        def everything() -> List[Message]:
            count = repository.clear_all()
            if not count:
                return [info("No tasks to remove.")]
            if count == 1:
                return [success("Removed 1 task.")]
            return [success(f"Removed all {count} tasks.")]

        messages = dispatch(
            selection,
            lambda task_id: on_single(repository.require(task_id)),
            multiple,
            everything,
        )
        return DispatchOutcome.saved(messages)

    def do_complete(self, context: DispatchContext, selection: TaskSelection) -> DispatchOutcome:
        repository = context.repository
        today = context.current_date()
        rolled: List[Task] = []

        # Occurrences are created after the whole selection is completed so
        # new ids never fall inside the range being processed.
        def apply(task_id: int) -> None:
            task = repository.require(task_id)
            was_pending = not task.completed
            repository.complete(task_id)
            if was_pending and task.is_recurring:
                rolled.append(task)

        def on_single(task: Task) -> List[Message]:
            apply(task.id)
            return [success(f"Task '{task.description}' marked as completed.")]

        def summary(count: int, everything: bool) -> str:
            if everything and count > 1:
                return f"Completed all {count} tasks."
            return f"Completed {_count(count)}."

        outcome = self._bulk(
            context, selection, on_single, apply, summary, "No tasks to complete."
        )
        created = [
            success(
                f"Created recurring task with ID "
                f"{create_next_occurrence(repository, task, today)}: '{task.description}'"
            )
            for task in rolled
        ]
        return DispatchOutcome.saved([*outcome.messages, *created])

    def do_uncomplete(
        self, context: DispatchContext, selection: TaskSelection
    ) -> DispatchOutcome:
        repository = context.repository

        def on_single(task: Task) -> List[Message]:
            repository.uncomplete(task.id)
            return [success(f"Task '{task.description}' marked as pending.")]

        def summary(count: int, everything: bool) -> str:
            if everything and count > 1:
                return f"Marked all {count} tasks as pending."
            return f"Marked {_count(count)} as pending."

        return self._bulk(
            context,
            selection,
            on_single,
            repository.uncomplete,
            summary,
            "No tasks to mark as pending.",
        )

    def do_toggle(self, context: DispatchContext, selection: TaskSelection) -> DispatchOutcome:
        repository = context.repository

        def on_single(task: Task) -> List[Message]:
            repository.toggle(task.id)
            state = "completed" if task.completed else "pending"
            return [success(f"Task '{task.description}' marked as {state}.")]

        def summary(count: int, everything: bool) -> str:
            if everything and count > 1:
                return f"Toggled all {count} tasks."
            return f"Toggled {_count(count)}."

        return self._bulk(
            context, selection, on_single, repository.toggle, summary, "No tasks to toggle."
        )

    def do_priority(
        self,
        context: DispatchContext,
        selection: TaskSelection,
        priority: Optional[Priority],
    ) -> DispatchOutcome:
        repository = context.repository

        def apply(task_id: int) -> None:
            repository.set_priority(task_id, priority)

        def on_single(task: Task) -> List[Message]:
            apply(task.id)
            if priority is None:
                return [success(f"Priority cleared for task: '{task.description}'")]
            return [success(f"Priority set to {priority.label} for task: '{task.description}'")]

        def summary(count: int, everything: bool) -> str:
            if priority is None:
                return f"Cleared priority for {_count(count)}."
            return f"Set priority to {priority.label} for {_count(count)}."

        return self._bulk(context, selection, on_single, apply, summary, "No tasks to update.")

    def do_due(
        self, context: DispatchContext, task_id: int, due_date: Optional[date]
    ) -> DispatchOutcome:
        task = context.repository.set_due_date(task_id, due_date)
        if due_date is None:
            text = f"Due date cleared for task: '{task.description}'"
        else:
            text = f"Due date set to {format_date(due_date)} for task: '{task.description}'"
        return DispatchOutcome.saved([success(text)])

    def do_edit(self, context: DispatchContext, task_id: int, description: str) -> DispatchOutcome:
        task = context.repository.require(task_id)
        old = task.description
        context.repository.edit(task_id, description)
        return DispatchOutcome.saved([success(f"Task '{old}' updated to '{task.description}'.")])

    def do_category(
        self,
        context: DispatchContext,
        selection: TaskSelection,
        category: Optional[str],
    ) -> DispatchOutcome:
        repository = context.repository

        def apply(task_id: int) -> None:
            repository.set_category(task_id, category)

        def on_single(task: Task) -> List[Message]:
            apply(task.id)
            if category is None:
                return [success(f"Category cleared for task: '{task.description}'")]
            return [success(f"Category set to '{category}' for task: '{task.description}'")]

        def summary(count: int, everything: bool) -> str:
            if category is None:
                return f"Cleared category for {_count(count)}."
            return f"Set category to '{category}' for {_count(count)}."

        return self._bulk(context, selection, on_single, apply, summary, "No tasks to update.")

    def do_recurring(
        self,
        context: DispatchContext,
        selection: TaskSelection,
        recurrence: Optional[Recurrence],
    ) -> DispatchOutcome:
        repository = context.repository

        def apply(task_id: int) -> None:
            repository.set_recurrence(task_id, recurrence)

        def on_single(task: Task) -> List[Message]:
            apply(task.id)
            if recurrence is None:
                return [success(f"Recurrence cleared for task: '{task.description}'")]
            return [
                success(f"Recurrence set to '{recurrence.label}' for task: '{task.description}'")
            ]

        def summary(count: int, everything: bool) -> str:
            if recurrence is None:
                return f"Cleared recurrence for {_count(count)}."
            return f"Set recurrence to '{recurrence.label}' for {_count(count)}."

        return self._bulk(context, selection, on_single, apply, summary, "No tasks to update.")

    def do_depend(
        self, context: DispatchContext, task_id: int, depends_on_id: int
    ) -> DispatchOutcome:
        add_dependency(context.repository, task_id, depends_on_id)
        return DispatchOutcome.saved(
            [success(f"Task {task_id} now depends on task {depends_on_id}.")]
        )

    def do_undepend(
        self, context: DispatchContext, task_id: int, depends_on_id: int
    ) -> DispatchOutcome:
        if remove_dependency(context.repository, task_id, depends_on_id):
            message = success(f"Task {task_id} no longer depends on task {depends_on_id}.")
        else:
            message = info(f"Task {task_id} does not depend on task {depends_on_id}.")
        return DispatchOutcome.saved([message])

    def do_graph(self, context: DispatchContext, task_id: int) -> DispatchOutcome:
        repository = context.repository
        lines = render_dependency_tree(dependency_tree(repository, task_id))
        messages = [info(line) for line in lines]
        if not repository.require(task_id).dependency_ids:
            messages.append(info(f"Task {task_id} has no dependencies."))
        elif dependencies_completed(repository, task_id):
            messages.append(success("All dependencies are completed."))
        else:
            messages.append(info(f"Task {task_id} is blocked by incomplete dependencies."))
        return DispatchOutcome.build(messages)

    def do_categories(self, context: DispatchContext) -> DispatchOutcome:
        categories = context.repository.categories()
        if not categories:
            return DispatchOutcome.build([info("No categories found.")])
        return DispatchOutcome.build(info(f"- {name}") for name in categories)

    def do_search(self, context: DispatchContext, keyword: str) -> DispatchOutcome:
        found = context.repository.search(keyword)
        if not found:
            return DispatchOutcome.build([info(f"No tasks found matching '{keyword}'.")])
        lines = format_task_list(found, context.current_date())
        return DispatchOutcome.build(
            [info(f"Search results for '{keyword}':"), *(info(line) for line in lines)]
        )

    def do_stats(self, context: DispatchContext) -> DispatchOutcome:
        stats = compute_statistics(context.repository.all())
        return DispatchOutcome.build(info(line) for line in format_statistics(stats))
