"""Grouping of classified entries into ordered release note sections."""

from __future__ import annotations

from typing import TYPE_CHECKING

from release_note.core.notes import ReleaseGroup

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_note.core.classifier import ClassifiedEntry


def _recency_key(entry: ClassifiedEntry) -> tuple[float, str]:
    # Most recent first, then id ascending.
    return (-entry.commit.timestamp.timestamp(), entry.commit.id)


def sort_entries(entries: Iterable[ClassifiedEntry]) -> list[ClassifiedEntry]:
    """Order entries by commit recency, newest first, ties by id."""
    return sorted(entries, key=_recency_key)


def group_entries(
    entries: Iterable[ClassifiedEntry],
    category_order: Sequence[str],
) -> tuple[ReleaseGroup, ...]:
    """Bucket entries by category.

    Categories listed in ``category_order`` come first, in that order.
    Other categories follow in the order they first appear among the
    recency-sorted entries, so the result does not depend on input order.
    Empty categories are never emitted.

    Args:
        entries: Classified entries in any order
        category_order: Preferred category ordering

    Returns:
        Non-empty groups in display order
    """
    buckets: dict[str, list[ClassifiedEntry]] = {}
    for entry in sort_entries(entries):
        buckets.setdefault(entry.category, []).append(entry)

    ordered = [c for c in category_order if c in buckets]
    ordered += [c for c in buckets if c not in ordered]

    return tuple(
        ReleaseGroup(category=category, entries=tuple(buckets[category]))
        for category in ordered
    )
