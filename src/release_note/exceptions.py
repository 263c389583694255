"""Exception hierarchy for release-note.

Every failure surfaced to callers derives from :class:`ReleaseNoteError`.
Malformed commit messages are never errors; they degrade to the
``unknown`` commit type and are only counted.
"""

from __future__ import annotations


class ReleaseNoteError(Exception):
    """Base class for all release-note errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(ReleaseNoteError):
    """Invalid classification or rendering configuration."""


class ConfigNotFoundError(ConfigurationError):
    """No pyproject.toml could be located."""


class ConfigValidationError(ConfigurationError):
    """Configuration failed schema validation."""


# =============================================================================
# Versions
# =============================================================================


class VersionParseError(ReleaseNoteError):
    """A version string is not a valid semantic version."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid semantic version: {value!r}")
        self.value = value


# =============================================================================
# Rendering
# =============================================================================


class TemplateError(ReleaseNoteError):
    """A release note template is malformed.

    Attributes:
        directive: The offending template source line, when known
        lineno: 1-based line number of the directive, when known
    """

    def __init__(
        self,
        message: str,
        *,
        directive: str | None = None,
        lineno: int | None = None,
    ) -> None:
        if directive:
            location = f" (line {lineno})" if lineno else ""
            message = f"{message}{location}: {directive}"
        super().__init__(message)
        self.directive = directive
        self.lineno = lineno


# =============================================================================
# Pipeline
# =============================================================================


class PipelineCancelledError(ReleaseNoteError):
    """The invocation was cancelled before classification started."""


# =============================================================================
# Version control
# =============================================================================


class GitError(ReleaseNoteError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        if stderr:
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)
        self.stderr = stderr
