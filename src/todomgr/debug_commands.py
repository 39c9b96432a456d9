"""
Debug verbs for generating and clearing sample data.
"""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from .commands import CommandController, DispatchContext, DispatchOutcome, info, success
from .errors import InvalidIdError, MissingArgumentsError, OutOfRangeError
from .models import Priority, Recurrence
from .repository import TaskRepository

logger = logging.getLogger(__name__)

MAX_GENERATED_TASKS = 1000
MAX_GENERATED_PROJECTS = 50
MAX_TASKS_PER_PROJECT = 100

TASK_TEMPLATES = (
    "Buy groceries",
    "Write documentation",
    "Review pull requests",
    "Update dependencies",
    "Fix bug in authentication",
    "Implement new feature",
    "Refactor legacy code",
    "Write unit tests",
    "Deploy to production",
    "Meeting with team",
    "Code review session",
    "Update README",
    "Optimize database queries",
    "Design new UI",
    "Research new technology",
    "Client presentation",
    "Performance testing",
    "Security audit",
    "Backup database",
    "Configure CI/CD pipeline",
)
SUBTASK_TEMPLATES = (
    "Research requirements",
    "Create outline",
    "Draft initial version",
    "Review and revise",
    "Get feedback",
    "Make final changes",
    "Test thoroughly",
    "Update documentation",
    "Notify stakeholders",
    "Archive old files",
    "Create backup",
    "Verify results",
    "Clean up code",
    "Add error handling",
    "Write tests",
    "Update changelog",
    "Deploy changes",
    "Monitor for issues",
    "Document decisions",
    "Schedule follow-up",
)
CATEGORIES = (
    "work",
    "personal",
    "urgent",
    "bug",
    "feature",
    "documentation",
    "testing",
    "deployment",
    "maintenance",
    "research",
)
PROJECT_TEMPLATES = (
    "Work",
    "Personal",
    "Home",
    "Shopping",
    "Health",
    "Finance",
    "Learning",
    "Projects",
    "Goals",
    "Ideas",
    "Research",
    "Development",
    "Marketing",
    "Design",
    "Testing",
    "Documentation",
    "Client Work",
    "Side Projects",
    "Hobbies",
    "Travel",
)


class RandomTaskGenerator:
    """
    Fill repositories with plausible random tasks.

    Parameters
    ----------
    rng : Optional[random.Random], optional
        Random source (default: a fresh unseeded generator).
    today : Optional[date], optional
        Base date for due dates (default: today).
    """

    def __init__(self, rng: Optional[random.Random] = None, today: Optional[date] = None) -> None:
        self.rng = rng or random.Random()
        self.today = today

    def _maybe(self, probability: float) -> bool:
        return self.rng.random() < probability

    def due_date(self) -> Optional[date]:
        if not self._maybe(0.6):
            return None
        base = self.today or date.today()
        return base + timedelta(days=self.rng.randint(-7, 30))

    def populate(self, repository: TaskRepository, count: int) -> List[int]:
        """
        Add ``count`` top-level tasks, some with subtasks and dependencies.

        Dependencies only point at earlier generated tasks, so the generated
        graph is acyclic.

        Returns
        -------
        List[int]
            Ids of the generated top-level tasks.
        """
        created: List[int] = []
        for index in range(count):
            task_id = repository.add(self.rng.choice(TASK_TEMPLATES))
            task = repository.require(task_id)
            task.priority = self.rng.choice(list(Priority))
            task.completed = self._maybe(0.3)
            task.due_date = self.due_date()
            if self._maybe(0.7):
                task.category = self.rng.choice(CATEGORIES)
            if self._maybe(0.2):
                task.recurrence = self.rng.choice(list(Recurrence))

            if self._maybe(0.5):
                for _ in range(self.rng.randint(1, 5)):
                    subtask_id = repository.add_subtask(
                        task_id, self.rng.choice(SUBTASK_TEMPLATES)
                    )
                    subtask = repository.require(subtask_id)
                    subtask.priority = self.rng.choice(list(Priority))
                    subtask.completed = self._maybe(0.2)

            if index > 0 and self._maybe(0.3):
                task.dependency_ids.add(self.rng.choice(created))
            created.append(task_id)
        return created

    def project_names(self, count: int, taken: Sequence[str] = ()) -> List[str]:
        """
        Pick ``count`` distinct project names not in ``taken``.

        Template names are used first; later names get a numeric suffix.
        """
        used = set(taken)
        templates = list(PROJECT_TEMPLATES)
        self.rng.shuffle(templates)
        names: List[str] = []
        suffix = 2
        while len(names) < count:
            if templates:
                candidate = templates.pop()
            else:
                candidate = f"{self.rng.choice(PROJECT_TEMPLATES)} {suffix}"
                suffix += 1
            if candidate in used:
                continue
            used.add(candidate)
            names.append(candidate)
        return names


def _parse_count(text: str, field: str, low: int, high: int, error_text: str) -> int:
    value = text.strip()
    digits = value[1:] if value.startswith("-") else value
    if not digits.isdecimal():
        raise InvalidIdError(error_text)
    number = int(value)
    if number < low:
        constraint = "Must be greater than 0" if low == 1 else f"Must be at least {low}"
        raise OutOfRangeError(field, value, constraint)
    if number > high:
        raise OutOfRangeError(field, value, f"Cannot exceed {high}")
    return number


def parse_generate(args: Sequence[str]) -> Tuple[int]:
    """
    Parse ``debug:gen <count>``.

    Examples
    --------
    >>> parse_generate(["25"])
    (25,)
    >>> parse_generate(["1001"])
    Traceback (most recent call last):
    ...
    todomgr.errors.OutOfRangeError: count '1001' is out of range. Cannot exceed 1000
    """
    if not args:
        raise MissingArgumentsError("debug:gen", "debug:gen <count>")
    return (
        _parse_count(
            args[0], "count", 1, MAX_GENERATED_TASKS, "Invalid count. Please provide a number."
        ),
    )


def parse_generate_projects(args: Sequence[str]) -> Tuple[int, int]:
    if len(args) < 2:
        raise MissingArgumentsError(
            "debug:gen-projects", "debug:gen-projects <project_count> <tasks_per_project>"
        )
    error_text = "Invalid count. Please provide numbers."
    projects = _parse_count(args[0], "project_count", 1, MAX_GENERATED_PROJECTS, error_text)
    tasks = _parse_count(args[1], "tasks_per_project", 0, MAX_TASKS_PER_PROJECT, error_text)
    return projects, tasks


class DebugCommandController(CommandController):
    """
    Own the ``debug:*`` verbs; only consulted while debug mode is on.
    """

    name = "debug"
    requires_debug = True

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        super().__init__()
        self.rng = rng or random.Random()
        self.register("debug:gen", self.do_generate, parse_generate)
        self.register("debug:clear", self.do_clear)
        self.register("debug:gen-projects", self.do_generate_projects, parse_generate_projects)
        self.register("debug:clear-projects", self.do_clear_projects)

    def _generator(self, context: DispatchContext) -> RandomTaskGenerator:
        return RandomTaskGenerator(self.rng, context.today)

    def do_generate(self, context: DispatchContext, count: int) -> DispatchOutcome:
        self._generator(context).populate(context.repository, count)
        logger.debug("generated %d tasks in %r", count, context.projects.active_name)
        return DispatchOutcome.saved([success(f"Generated {count} random tasks.")])

    def do_clear(self, context: DispatchContext) -> DispatchOutcome:
        count = context.repository.clear_all()
        return DispatchOutcome.saved([success(f"Cleared {count} tasks.")])

    def do_generate_projects(
        self, context: DispatchContext, project_count: int, tasks_per_project: int
    ) -> DispatchOutcome:
        projects = context.projects
        generator = self._generator(context)
        names = generator.project_names(project_count, projects.list())
        for name in names:
            projects.create(name)
            if tasks_per_project:
                generator.populate(projects.get(name), tasks_per_project)
        logger.debug("generated projects %s", names)
        return DispatchOutcome.saved(
            [
                success(
                    f"Generated {project_count} projects with {tasks_per_project} tasks each."
                ),
                info(f"Projects: {', '.join(names)}"),
            ]
        )

    def do_clear_projects(self, context: DispatchContext) -> DispatchOutcome:
        projects = context.projects
        deleted = 0
        for name in projects.list():
            if name != projects.active_name:
                projects.delete(name)
                deleted += 1
        cleared = context.repository.clear_all()
        return DispatchOutcome.saved(
            [success(f"Deleted {deleted} projects and cleared {cleared} tasks.")]
        )
