"""
General verbs: help, quit, the debug toggle, and project management.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .commands import (
    Action,
    CommandController,
    DispatchContext,
    DispatchOutcome,
    info,
    success,
)
from .errors import EmptyInputError, InvalidValueError, MissingArgumentsError

HELP_HEADER = "todomgr commands:"
HELP_FOOTER = "Selections accept an id, a range (1-5), a list (1,3,5), or 'all'."

HELP_ENTRIES: Tuple[Tuple[str, str], ...] = (
    ("add <description>", "Add a new task."),
    ("add-subtask <parent_id> <description>", "Add a subtask (alias: subtask)."),
    ("list [filters] [sort:key] [asc|desc]", "List tasks; filters: done, todo, high, "
     "medium, low, overdue, not-overdue, category:name."),
    ("remove <selection>", "Remove tasks and their subtasks (aliases: rm, delete)."),
    ("complete <selection>", "Mark tasks completed (alias: done)."),
    ("uncomplete <selection>", "Mark tasks pending (alias: undo)."),
    ("toggle <selection>", "Toggle completion."),
    ("priority <selection> <level|none>", "Set priority: high/h, medium/med/m, low/l "
     "(alias: pri)."),
    ("due <id> <DD.MM.YYYY|none>", "Set or clear a due date (alias: set-due)."),
    ("edit <id> <description>", "Change a task description."),
    ("category <selection> <name|none>", "Set or clear a category (aliases: cat, "
     "set-category)."),
    ("recurring <selection> <daily|weekly|monthly|none>", "Set recurrence (aliases: "
     "recur, set-recurring)."),
    ("depend <id> <depends_on_id>", "Add a dependency (aliases: add-dep, depends-on)."),
    ("undepend <id> <depends_on_id>", "Remove a dependency (aliases: remove-dep, rm-dep)."),
    ("graph <id>", "Show the dependency tree of a task (aliases: deps, dep-graph)."),
    ("categories", "List categories in use."),
    ("search <keyword>", "Find tasks by description (alias: find)."),
    ("stats", "Show task statistics (alias: statistics)."),
    ("project new|switch|delete <name>", "Create, activate, or delete a project."),
    ("project rename <old> <new>", "Rename a project."),
    ("project list", "List projects (alias: projects)."),
    ("debug", "Toggle debug mode."),
    ("help", "Show this help (alias: h)."),
    ("quit", "Save and exit (aliases: exit, q)."),
)

DEBUG_HELP_ENTRIES: Tuple[Tuple[str, str], ...] = (
    ("debug:gen <count>", "Generate 1-1000 random tasks."),
    ("debug:gen-projects <projects> <tasks>", "Generate up to 50 projects with up to "
     "100 tasks each."),
    ("debug:clear", "Remove every task of the active project."),
    ("debug:clear-projects", "Delete all other projects and clear the active one."),
)

PROJECT_SUBCOMMANDS = {
    "new": "new",
    "create": "new",
    "switch": "switch",
    "use": "switch",
    "list": "list",
    "ls": "list",
    "delete": "delete",
    "remove": "delete",
    "rm": "delete",
    "rename": "rename",
}


def get_help_lines(include_debug: bool = False) -> List[str]:
    """
    Build the help text lines.

    Parameters
    ----------
    include_debug : bool, optional
        Whether to list debug commands too (default: False).

    Returns
    -------
    List[str]
        Lines to print for ``help``.

    Examples
    --------
    >>> lines = get_help_lines()
    >>> lines[0]
    'todomgr commands:'
    >>> any(line.strip().startswith("debug:gen") for line in lines)
    False
    >>> any(line.strip().startswith("debug:gen") for line in get_help_lines(True))
    True
    """
    entries = HELP_ENTRIES + (DEBUG_HELP_ENTRIES if include_debug else ())
    max_width = max(len(usage) for usage, _ in entries)
    lines = [HELP_HEADER]
    for usage, description in entries:
        lines.append(f"  {usage:<{max_width}}  {description}")
    lines.append(HELP_FOOTER)
    return lines


def _project_name(args: Sequence[str], usage: str, command: str) -> str:
    if not args:
        raise MissingArgumentsError(command, usage)
    name = " ".join(args).strip()
    if not name:
        raise EmptyInputError("Project name")
    return name


def parse_project(args: Sequence[str]) -> Tuple[str, Optional[str], Optional[str]]:
    """
    Parse ``project <subcommand> ...`` into (action, name, new name).

    Examples
    --------
    >>> parse_project(["new", "Home", "chores"])
    ('new', 'Home chores', None)
    >>> parse_project(["rename", "a", "b"])
    ('rename', 'a', 'b')
    >>> parse_project([])
    ('list', None, None)
    """
    if not args:
        return "list", None, None
    action = PROJECT_SUBCOMMANDS.get(args[0].lower())
    if action is None:
        raise InvalidValueError(
            "project command", args[0], "new, switch, list, delete, rename"
        )
    rest = list(args[1:])
    if action == "list":
        return action, None, None
    if action == "rename":
        old, new = parse_rename(rest)
        return action, old, new
    return action, _project_name(rest, f"project {action} <name>", "project"), None


def parse_rename(args: Sequence[str]) -> Tuple[str, str]:
    if len(args) < 2:
        raise MissingArgumentsError("rename-project", "project rename <old name> <new name>")
    return args[0], " ".join(args[1:]).strip()


def _alias_parser(action: str):
    def parse(args: Sequence[str]) -> Tuple[str, Optional[str], Optional[str]]:
        if action == "list":
            return action, None, None
        if action == "rename":
            old, new = parse_rename(args)
            return action, old, new
        command = f"{action}-project"
        return action, _project_name(args, f"{command} <name>", command), None

    return parse


class GeneralCommandController(CommandController):
    """
    Own help, quit, the debug toggle and project verbs.
    """

    name = "general"

    def __init__(self) -> None:
        super().__init__()
        self.register("help", self.do_help, aliases=("h", "?"))
        self.register("quit", self.do_quit, aliases=("exit", "q"))
        self.register("debug", self.do_debug)
        self.register("project", self.do_project, parse_project)
        self.register("new-project", self.do_project, _alias_parser("new"))
        self.register("switch-project", self.do_project, _alias_parser("switch"))
        self.register(
            "list-projects", self.do_project, _alias_parser("list"), ("projects",)
        )
        self.register("delete-project", self.do_project, _alias_parser("delete"))
        self.register("rename-project", self.do_project, _alias_parser("rename"))

    def do_help(self, context: DispatchContext) -> DispatchOutcome:
        lines = get_help_lines(include_debug=context.debug_active)
        return DispatchOutcome.build(info(line) for line in lines)

    def do_quit(self, context: DispatchContext) -> DispatchOutcome:
        return DispatchOutcome.build(
            [info("Goodbye! Stay organized.")],
            (Action.EXIT_MAIN_LOOP, Action.SAVE_STATE),
        )

    def do_debug(self, context: DispatchContext) -> DispatchOutcome:
        if context.debug_active:
            return DispatchOutcome.build(
                [success("Debug mode disabled.")], (Action.DISABLE_DEBUG_MODE,)
            )
        verbs = ", ".join(usage.split()[0] for usage, _ in DEBUG_HELP_ENTRIES)
        return DispatchOutcome.build(
            [success("Debug mode enabled."), info(f"Debug commands: {verbs}")],
            (Action.ENABLE_DEBUG_MODE,),
        )

    def do_project(
        self,
        context: DispatchContext,
        action: str,
        name: Optional[str],
        new_name: Optional[str],
    ) -> DispatchOutcome:
        projects = context.projects
        if action == "list":
            lines = [info("Projects:")]
            for project in projects.list():
                marker = "*" if project == projects.active_name else " "
                count = len(projects.get(project))
                noun = "task" if count == 1 else "tasks"
                lines.append(info(f"{marker} {project} ({count} {noun})"))
            return DispatchOutcome.build(lines)
        if action == "new":
            projects.create(name)
            text = f"Project '{name}' created."
        elif action == "switch":
            projects.switch(name)
            text = f"Switched to project '{name}'."
        elif action == "delete":
            projects.delete(name)
            text = f"Project '{name}' deleted."
        else:
            projects.rename(name, new_name)
            text = f"Project '{name}' renamed to '{new_name}'."
        return DispatchOutcome.saved([success(text)])
