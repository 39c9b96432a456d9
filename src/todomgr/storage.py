"""
JSON persistence for the project manager.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from .errors import StorageError
from .projects import DEFAULT_PROJECT_NAME, ProjectManager

logger = logging.getLogger(__name__)

DATA_ENV_VAR = "TODOMGR_DATA_PATH"


def get_storage_path() -> Path:
    """
    Return the path of the state file.

    Returns
    -------
    Path
        ``$TODOMGR_DATA_PATH`` when set, else ``~/.config/todomgr/projects.json``.
    """
    env_path = os.environ.get(DATA_ENV_VAR)
    if env_path:
        return Path(os.path.expandvars(os.path.expanduser(env_path)))
    return Path.home() / ".config" / "todomgr" / "projects.json"


def save_projects(projects: ProjectManager, path: Optional[Path] = None) -> Path:
    """
    Write every project to disk as pretty-printed JSON.

    Parameters
    ----------
    projects : ProjectManager
        State to write.
    path : Optional[Path], optional
        Override for the state file path.

    Returns
    -------
    Path
        Path that was written.

    Raises
    ------
    StorageError
        If the file or its directory cannot be written.
    """
    path = path or get_storage_path()
    payload = json.dumps(projects.to_dict(), indent=2)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n", encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Unable to save tasks to {path}: {exc}", path) from exc
    logger.debug("saved %d projects to %s", len(projects), path)
    return path


def load_projects(path: Optional[Path] = None) -> ProjectManager:
    """
    Load projects from disk, falling back to a fresh manager.

    A missing file, unreadable JSON, or a malformed payload all yield a new
    manager with an empty default project; the latter two are logged. A bare
    single-repository snapshot is loaded into the default project.

    Parameters
    ----------
    path : Optional[Path], optional
        Override for the state file path.

    Returns
    -------
    ProjectManager
        Loaded or fresh state.
    """
    path = path or get_storage_path()
    if not path.exists():
        return ProjectManager()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("ignoring unreadable state file %s: %s", path, exc)
        return ProjectManager()
    try:
        if isinstance(data, dict) and "projects" not in data and "tasks" in data:
            data = {
                "active": DEFAULT_PROJECT_NAME,
                "projects": [{"name": DEFAULT_PROJECT_NAME, **data}],
            }
        return ProjectManager.from_dict(data)
    except (TypeError, ValueError) as exc:
        logger.warning("ignoring malformed state file %s: %s", path, exc)
        return ProjectManager()
