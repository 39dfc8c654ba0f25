"""Config file discovery and loading.

Walk-up finder locates ``pilot.toml`` (or a ``pyproject.toml`` carrying a
``[tool.pilot]`` table), similar to how git finds .git/. The PILOT_CONFIG
env var and the --config CLI flag bypass the walk.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pilot.config.models import PilotConfig

CONFIG_FILENAME = "pilot.toml"
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "PILOT_CONFIG"


def read_config_table(path: Path) -> dict[str, Any]:
    """Parse *path* and return the pilot table.

    For ``pyproject.toml`` that is ``[tool.pilot]``; any other file is the
    table itself.

    Raises:
        tomllib.TOMLDecodeError: The file is not valid TOML.
    """
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        return dict(data.get("tool", {}).get("pilot", {}))
    return data


def _has_pilot_table(pyproject: Path) -> bool:
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError:
        return False
    return "pilot" in data.get("tool", {})


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for a config file.

    In each directory ``pilot.toml`` wins over ``pyproject.toml``; the
    latter only counts when it has a ``[tool.pilot]`` table. Returns None
    if nothing is found. Checks PILOT_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = current / PYPROJECT_FILENAME
        if pyproject.is_file() and _has_pilot_table(pyproject):
            return pyproject
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config(path: Path | None = None, cwd: Path | None = None) -> PilotConfig:
    """Load and validate config, discovering the file when *path* is None.

    Returns default PilotConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return PilotConfig()
    return PilotConfig.model_validate(read_config_table(path))
