"""End-to-end release note generation.

Stages run strictly in order::

    RawCommit[] ──parse (parallel)──► Commit[]
                     │  cancellation checkpoint
                     ▼
    classify (whole set, revert cancellation) ──► ClassifiedEntry[]
                     ▼
    group + recommend version ──► ReleaseNote ──render──► document

Configuration and the previous version are validated before any commit
is parsed. No file system or network access happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from release_note.config.models import ReleaseNoteConfig
from release_note.core.advisor import recommend_version
from release_note.core.classifier import ClassificationRules, classify_commits
from release_note.core.commits import (
    ParseFailureSummary,
    filter_skip_release_commits,
    parse_commits,
)
from release_note.core.grouper import group_entries
from release_note.core.notes import ReleaseNote
from release_note.core.renderer import Renderer
from release_note.core.version import Version, parse_version
from release_note.exceptions import PipelineCancelledError

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterable

    from release_note.core.commits import RawCommit


@dataclass(frozen=True)
class GeneratedReleaseNote:
    """A built note together with its rendered document."""

    note: ReleaseNote
    document: str

    @property
    def summary(self) -> ParseFailureSummary:
        return self.note.summary


def build_release_note(
    raw_commits: Iterable[RawCommit],
    previous_version: Version | str | None,
    config: ReleaseNoteConfig | None = None,
    *,
    cancel_event: threading.Event | None = None,
    generated_at: datetime | None = None,
) -> ReleaseNote:
    """Parse, classify and group a commit range.

    Args:
        raw_commits: Commits of the range, newest or oldest first
        previous_version: Last released version; ``None``/"none" for a first release
        config: Configuration (defaults when omitted)
        cancel_event: Checked once, between parsing and classification
        generated_at: Timestamp recorded on the note (defaults to now, UTC).
            Pass a fixed value for byte-identical output across runs

    Returns:
        The grouped, versioned release note

    Raises:
        ConfigurationError: On invalid classification settings
        VersionParseError: If ``previous_version`` is not a semantic version
        PipelineCancelledError: If ``cancel_event`` was set
    """
    config = config or ReleaseNoteConfig()
    rules = ClassificationRules.from_config(config.commits)
    previous = parse_version(previous_version)

    raws = filter_skip_release_commits(raw_commits, config.commits.skip_release_patterns)
    parsed = parse_commits(raws, workers=config.workers)

    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelledError("Release note generation was cancelled")

    classified = classify_commits(parsed.commits, rules)
    recommended, bump = recommend_version(previous, classified.entries, rules)
    groups = group_entries(classified.entries, rules.category_order)

    return ReleaseNote(
        previous_version=previous,
        recommended_version=recommended,
        bump=bump,
        groups=groups,
        generated_at=generated_at or datetime.now(UTC),
        summary=parsed.summary,
    )


def generate_release_note(
    raw_commits: Iterable[RawCommit],
    previous_version: Version | str | None,
    config: ReleaseNoteConfig | None = None,
    *,
    template: str | None = None,
    cancel_event: threading.Event | None = None,
    generated_at: datetime | None = None,
) -> GeneratedReleaseNote:
    """Build and render a release note.

    Args:
        raw_commits: Commits of the range
        previous_version: Last released version, if any
        config: Configuration (defaults when omitted)
        template: Jinja2 source overriding ``config.render.template``
        cancel_event: Cancellation flag checked after parsing
        generated_at: Timestamp recorded on the note; fix it for reproducible output

    Returns:
        The structured note and the rendered document

    Raises:
        TemplateError: If the template is malformed (no document is returned)
    """
    config = config or ReleaseNoteConfig()
    note = build_release_note(
        raw_commits,
        previous_version,
        config,
        cancel_event=cancel_event,
        generated_at=generated_at,
    )
    document = Renderer(config.render, template=template).render(note)
    return GeneratedReleaseNote(note=note, document=document)
