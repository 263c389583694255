"""Pydantic models for release-note configuration.

Configuration lives in ``[tool.release-note]`` of pyproject.toml::

    [tool.release-note]
    workers = 4

    [tool.release-note.commits]
    include_types = ["feat", "fix", "perf"]
    category_labels = { perf = "Speed-ups" }

    [tool.release-note.render]
    format = "markdown"
    heading_level = 2

These models only check shapes and ranges. Cross-field rules (known type
tokens, duplicate labels, category order) are enforced when the commit
settings are compiled into ``ClassificationRules``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INCLUDE_TYPES = ["feat", "fix", "perf", "refactor", "docs"]

DEFAULT_CATEGORY_ORDER = [
    "Breaking Changes",
    "Features",
    "Bug Fixes",
    "Performance",
    "Dependency Updates",
    "Refactoring",
    "Documentation",
]

DEFAULT_SKIP_RELEASE_PATTERNS = ["[skip release]", "[release skip]", "[no release]"]

DEFAULT_REFERENCE_TOKENS = ["Closes", "Fixes", "Resolves", "Refs", "See"]


class CommitsConfig(BaseModel):
    """Commit classification settings."""

    model_config = ConfigDict(extra="forbid")

    include_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INCLUDE_TYPES),
        description="Commit types kept in the release note",
    )
    category_labels: dict[str, str] = Field(
        default_factory=dict,
        description="Overrides for the type -> category heading mapping",
    )
    category_order: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORY_ORDER),
        description="Explicit category ordering; unlisted categories follow",
    )
    breaking_label: str = Field(
        default="Breaking Changes",
        min_length=1,
        description="Category for every breaking commit",
    )
    dependency_scope: str | None = Field(
        default="deps",
        description="Scope that routes included commits to the dependency category",
    )
    dependency_label: str = Field(
        default="Dependency Updates",
        min_length=1,
        description="Category for dependency commits",
    )
    skip_release_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SKIP_RELEASE_PATTERNS),
        description="Markers that drop a commit before parsing",
    )


class RenderConfig(BaseModel):
    """Output document settings."""

    model_config = ConfigDict(extra="forbid")

    format: Literal["markdown", "text", "json"] = Field(
        default="markdown",
        description="Output format",
    )
    template: str | None = Field(
        default=None,
        description="Jinja2 template source; None uses the built-in layout",
    )
    heading_level: int = Field(default=3, ge=1, le=6)
    show_title: bool = True
    short_id_length: int = Field(default=7, ge=4, le=40)
    commit_link_template: str | None = Field(
        default=None,
        description="Commit URL with an {id} placeholder",
    )
    reference_link_template: str | None = Field(
        default=None,
        description="Issue URL with a {reference} placeholder",
    )
    reference_tokens: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REFERENCE_TOKENS),
        description="Footer tokens rendered as issue references",
    )
    empty_message: str = "No notable changes."


class ReleaseNoteConfig(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    commits: CommitsConfig = Field(default_factory=CommitsConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    workers: int = Field(default=1, ge=1, le=64)
    tag_prefix: str = "v"
