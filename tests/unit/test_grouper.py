"""Tests for grouping classified entries."""

from __future__ import annotations

import random
from datetime import UTC, datetime

import pytest

from release_note.config.models import CommitsConfig
from release_note.core.classifier import ClassificationRules, ClassifiedEntry, classify_commits
from release_note.core.commits import Commit, CommitType, parse_commits
from release_note.core.grouper import group_entries, sort_entries


def _entry(id: str, category: str, minute: int) -> ClassifiedEntry:
    commit = Commit(
        id=id,
        subject_line=f"feat: {id}",
        body_lines=(),
        type=CommitType.FEAT,
        description=id,
        timestamp=datetime(2024, 1, 1, 0, minute, tzinfo=UTC),
    )
    return ClassifiedEntry(commit=commit, category=category)


class TestGroupEntries:
    """Tests for group_entries()."""

    def test_category_order(self):
        """Listed categories come first in the configured order."""
        entries = [
            _entry("a", "Bug Fixes", 1),
            _entry("b", "Features", 2),
            _entry("c", "Breaking Changes", 3),
        ]
        groups = group_entries(entries, ["Breaking Changes", "Features", "Bug Fixes"])

        assert [g.category for g in groups] == ["Breaking Changes", "Features", "Bug Fixes"]

    def test_unlisted_categories_follow_in_first_seen_order(self):
        """Unlisted categories are appended in recency first-seen order."""
        entries = [
            _entry("a", "Chores", 1),
            _entry("b", "Tests", 5),
            _entry("c", "Features", 3),
        ]
        groups = group_entries(entries, ["Features"])

        assert [g.category for g in groups] == ["Features", "Tests", "Chores"]

    def test_entries_newest_first_ties_by_id(self):
        """Within a category, newest first and equal timestamps sort by id."""
        entries = [
            _entry("b", "Features", 1),
            _entry("z", "Features", 2),
            _entry("a", "Features", 1),
        ]
        (group,) = group_entries(entries, ["Features"])

        assert [e.id for e in group.entries] == ["z", "a", "b"]

    def test_empty_categories_omitted(self):
        """Ordered categories without entries never appear."""
        groups = group_entries([_entry("a", "Features", 1)], ["Breaking Changes", "Features"])

        assert [g.category for g in groups] == ["Features"]
        assert all(len(g) > 0 for g in groups)

    def test_no_entries(self):
        """No entries yields no groups."""
        assert group_entries([], ["Features"]) == ()

    def test_sort_entries(self):
        """sort_entries orders by recency then id."""
        entries = [_entry("x", "A", 0), _entry("y", "A", 9)]

        assert [e.id for e in sort_entries(entries)] == ["y", "x"]


class TestDeterminism:
    """Grouping is independent of input order."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_shuffled_input_gives_identical_groups(self, sample_commits, seed):
        """Shuffling raw commits does not change the grouped output."""
        rules = ClassificationRules.from_config(CommitsConfig())

        def grouped(raws):
            parsed = parse_commits(raws, workers=3)
            entries = classify_commits(parsed.commits, rules).entries
            return [
                (g.category, [e.id for e in g.entries])
                for g in group_entries(entries, rules.category_order)
            ]

        shuffled = list(sample_commits)
        random.Random(seed).shuffle(shuffled)

        assert grouped(shuffled) == grouped(sample_commits)
