"""Configuration management for release-note."""

from __future__ import annotations

from release_note.config.loader import load_config, load_config_or_default
from release_note.config.models import (
    CommitsConfig,
    ReleaseNoteConfig,
    RenderConfig,
)

__all__ = [
    "CommitsConfig",
    "ReleaseNoteConfig",
    "RenderConfig",
    "load_config",
    "load_config_or_default",
]
