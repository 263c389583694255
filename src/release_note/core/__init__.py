"""Core business logic for release-note.

This package holds the classification and rendering pipeline:
- Conventional commit parsing
- Classification, revert cancellation and grouping
- Semantic version recommendation
- Template rendering
"""

from __future__ import annotations

from release_note.core.advisor import calculate_bump, recommend_version
from release_note.core.classifier import (
    ClassificationResult,
    ClassificationRules,
    ClassifiedEntry,
    classify,
    classify_commits,
)
from release_note.core.commits import (
    Commit,
    CommitType,
    ParseFailureSummary,
    ParseResult,
    RawCommit,
    filter_skip_release_commits,
    parse_commit,
    parse_commits,
)
from release_note.core.grouper import group_entries
from release_note.core.notes import ReleaseGroup, ReleaseNote
from release_note.core.pipeline import (
    GeneratedReleaseNote,
    build_release_note,
    generate_release_note,
)
from release_note.core.renderer import Renderer
from release_note.core.version import BumpType, Version, parse_version

__all__ = [
    # Version
    "BumpType",
    "Version",
    "parse_version",
    # Commits
    "Commit",
    "CommitType",
    "ParseFailureSummary",
    "ParseResult",
    "RawCommit",
    "filter_skip_release_commits",
    "parse_commit",
    "parse_commits",
    # Classification
    "ClassificationResult",
    "ClassificationRules",
    "ClassifiedEntry",
    "classify",
    "classify_commits",
    # Grouping and versioning
    "ReleaseGroup",
    "ReleaseNote",
    "calculate_bump",
    "group_entries",
    "recommend_version",
    # Rendering
    "GeneratedReleaseNote",
    "Renderer",
    "build_release_note",
    "generate_release_note",
]
