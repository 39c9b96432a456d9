#!/usr/bin/env python3
"""
Task tracking with projects, subtasks, dependencies and recurring tasks.
"""

import logging
import sys
from functools import partial
from pathlib import Path
from typing import List, Optional

from .output import ConsoleSink, LineSink
from .registry import CommandRegistry
from .session import LineSource, Session, StreamLineSource, make_line_source
from .storage import get_storage_path, load_projects, save_projects

__all__ = ["build_app", "configure_logging", "main", "open_session"]

LOG_FORMAT = "%(levelname)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Configure root logging once for the CLI.

    Parameters
    ----------
    verbose : bool, optional
        Log at DEBUG instead of WARNING (default: False).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def open_session(
    data_path: Optional[Path] = None,
    debug: bool = False,
    save: bool = True,
    sink: Optional[LineSink] = None,
    source: Optional[LineSource] = None,
) -> Session:
    """
    Load state and wire a session around it.

    Parameters
    ----------
    data_path : Optional[Path], optional
        State file override (default: ``get_storage_path()``).
    debug : bool, optional
        Start with debug commands enabled (default: False).
    save : bool, optional
        Persist state after mutating commands (default: True).
    sink : Optional[LineSink], optional
        Output target (default: the console).
    source : Optional[LineSource], optional
        Input source (default: prompt_toolkit on a terminal, else stdin).

    Returns
    -------
    Session
        Ready-to-run session.
    """
    path = data_path or get_storage_path()
    registry = CommandRegistry(load_projects(path), debug_active=debug)
    return Session(
        registry,
        sink or ConsoleSink(),
        source or make_line_source(registry.verbs),
        save=partial(save_projects, path=path) if save else None,
    )


def build_app():
    """
    Build the Typer app lazily to keep fast-path imports light.

    Returns
    -------
    typer.Typer
        Configured Typer application for the todomgr CLI.
    """
    import typer

    app = typer.Typer(help="Track tasks across projects", add_completion=False)

    @app.callback(invoke_without_command=True)
    def main_callback(
        ctx: typer.Context,
        data: Optional[Path] = typer.Option(
            None,
            "--data",
            help="State file (default: $TODOMGR_DATA_PATH or ~/.config/todomgr/projects.json).",
        ),
        debug: bool = typer.Option(False, "--debug", help="Start with debug commands enabled."),
        no_save: bool = typer.Option(False, "--no-save", help="Do not write state to disk."),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Log diagnostics."),
    ):
        """
        Run the interactive prompt unless a subcommand is given.
        """
        configure_logging(verbose)
        ctx.obj = {"data": data, "debug": debug, "save": not no_save}
        if ctx.invoked_subcommand is None:
            open_session(data, debug=debug, save=not no_save).run()

    @app.command("exec")
    def exec_cmd(
        ctx: typer.Context,
        line: List[str] = typer.Argument(..., help="Command line to run, e.g. add Buy milk."),
    ):
        """
        Run a single command and exit; the exit code is 1 if it failed.
        """
        options = ctx.obj or {}
        session = open_session(
            options.get("data"),
            debug=options.get("debug", False),
            save=options.get("save", True),
            source=StreamLineSource(sys.stdin),
        )
        session.handle_line(" ".join(line))
        if session.errors:
            raise typer.Exit(code=1)

    return app


def main():
    """
    Entry point for the todomgr command.
    """
    app = build_app()
    app(args=sys.argv[1:], prog_name="todomgr")


if __name__ == "__main__":
    main()
