"""release-note: release notes from conventional commits.

Parses a range of commits, classifies them by conventional commit type,
recommends the next semantic version and renders the result through a
Jinja2 template.
"""

from __future__ import annotations

__version__ = "0.1.0"

from release_note.core import (
    BumpType,
    ReleaseNote,
    Renderer,
    Version,
    build_release_note,
    generate_release_note,
)
from release_note.exceptions import (
    ConfigurationError,
    ReleaseNoteError,
    TemplateError,
    VersionParseError,
)

__all__ = [
    "BumpType",
    "ConfigurationError",
    "ReleaseNote",
    "ReleaseNoteError",
    "Renderer",
    "TemplateError",
    "Version",
    "VersionParseError",
    "__version__",
    "build_release_note",
    "generate_release_note",
]
