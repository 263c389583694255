"""Next-version recommendation from classified commits."""

from __future__ import annotations

from typing import TYPE_CHECKING

from release_note.core.commits import CommitType
from release_note.core.version import BumpType, Version
from release_note.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_note.core.classifier import ClassificationRules, ClassifiedEntry

logger = get_logger(__name__)


def calculate_bump(entries: Iterable[ClassifiedEntry], rules: ClassificationRules) -> BumpType:
    """Determine the version increment for a set of entries.

    Must be given the entries before grouping. Any breaking entry forces
    a major bump, any feature a minor bump, and anything else that
    survived classification a patch bump. No entries means no bump.
    Pre-1.0 versions get no special treatment.
    """
    bump = BumpType.NONE

    for entry in entries:
        if entry.category == rules.breaking_label:
            return BumpType.MAJOR
        if entry.commit.type == CommitType.FEAT:
            bump = BumpType.MINOR
        elif bump == BumpType.NONE:
            bump = BumpType.PATCH

    return bump


def recommend_version(
    previous: Version,
    entries: Iterable[ClassifiedEntry],
    rules: ClassificationRules,
) -> tuple[Version, BumpType]:
    """Recommend the next version after ``previous``.

    Returns:
        The recommended version and the bump that produced it
    """
    bump = calculate_bump(entries, rules)
    recommended = previous.bump(bump)

    logger.info(
        "version_recommended",
        previous=str(previous),
        recommended=str(recommended),
        bump=str(bump),
    )
    return recommended, bump
