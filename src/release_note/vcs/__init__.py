"""Version control access for release-note."""

from __future__ import annotations

from release_note.vcs.git import GitRepository, parse_log_output

__all__ = ["GitRepository", "parse_log_output"]
