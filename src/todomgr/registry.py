"""
Ordered dispatch of input lines across command controllers.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from .commands import Action, CommandController, DispatchContext, DispatchOutcome
from .debug_commands import DebugCommandController
from .errors import EmptyCommandError
from .general_commands import GeneralCommandController
from .projects import ProjectManager
from .task_commands import TaskCommandController

logger = logging.getLogger(__name__)


def default_controllers() -> List[CommandController]:
    return [TaskCommandController(), GeneralCommandController(), DebugCommandController()]


class CommandRegistry:
    """
    Try controllers in order until one recognizes the verb.

    Parameters
    ----------
    projects : Optional[ProjectManager], optional
        Project manager to operate on (default: a fresh one).
    debug_active : bool, optional
        Initial debug mode (default: False).
    controllers : Optional[Sequence[CommandController]], optional
        Controllers in priority order (default: task, general, debug).
    today : Optional[date], optional
        Fixed reference date, mainly for tests (default: the real date).

    Examples
    --------
    >>> registry = CommandRegistry()
    >>> registry.try_execute("add Water plants").texts
    ["Task added with ID 1: 'Water plants'"]
    >>> registry.try_execute("fly away") is None
    True
    """

    def __init__(
        self,
        projects: Optional[ProjectManager] = None,
        debug_active: bool = False,
        controllers: Optional[Sequence[CommandController]] = None,
        today: Optional[date] = None,
    ) -> None:
        self.projects = projects if projects is not None else ProjectManager()
        self.debug_active = debug_active
        self.controllers = list(controllers) if controllers is not None else default_controllers()
        self.today = today

    def active_controllers(self) -> List[CommandController]:
        return [
            controller
            for controller in self.controllers
            if self.debug_active or not controller.requires_debug
        ]

    def verbs(self) -> List[str]:
        found = set()
        for controller in self.active_controllers():
            found.update(controller.verbs)
        return sorted(found)

    def try_execute(self, line: str) -> Optional[DispatchOutcome]:
        """
        Dispatch one input line.

        Returns
        -------
        Optional[DispatchOutcome]
            Outcome of the first controller that handled the line, or None
            when no controller recognized the verb.

        Raises
        ------
        EmptyCommandError
            If the line is blank.
        TodoError
            If the owning controller rejected the arguments or the operation.
        """
        if not line or not line.strip():
            raise EmptyCommandError()
        context = DispatchContext(self.projects, self.debug_active, self.today)
        for controller in self.active_controllers():
            outcome = controller.try_execute(line, context)
            if outcome is None:
                continue
            logger.debug("%s controller handled %r", controller.name, line)
            self._apply(outcome)
            return outcome
        return None

    def _apply(self, outcome: DispatchOutcome) -> None:
        if outcome.has(Action.ENABLE_DEBUG_MODE):
            self.debug_active = True
        if outcome.has(Action.DISABLE_DEBUG_MODE):
            self.debug_active = False
