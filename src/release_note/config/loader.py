"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_note.config.models import ReleaseNoteConfig
from release_note.exceptions import ConfigNotFoundError, ConfigValidationError

TOOL_KEY = "release-note"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in ``start`` or any of its parents.

    Args:
        start: Directory to start from (defaults to cwd)

    Returns:
        Path to the nearest pyproject.toml

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()

    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate

    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_release_note_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-note]`` table, or an empty dict."""
    return dict(pyproject.get("tool", {}).get(TOOL_KEY, {}))


def load_config(path: Path | None = None) -> ReleaseNoteConfig:
    """Load release-note configuration for a project.

    Args:
        path: Project directory or pyproject.toml path (defaults to cwd)

    Returns:
        Validated configuration; defaults when the tool table is missing

    Raises:
        ConfigNotFoundError: If no pyproject.toml can be found
        ConfigValidationError: If the tool table fails validation
    """
    if path is not None and path.is_file():
        pyproject_path = path
    else:
        pyproject_path = find_pyproject_toml(path)

    data = extract_release_note_config(load_pyproject_toml(pyproject_path))

    try:
        return ReleaseNoteConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Invalid [tool.{TOOL_KEY}] configuration in {pyproject_path}:\n{e}"
        ) from e


def load_config_or_default(path: Path | None = None) -> ReleaseNoteConfig:
    """Like :func:`load_config`, but fall back to defaults without a pyproject.toml."""
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return ReleaseNoteConfig()
