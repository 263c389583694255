"""Commit classification.

Maps parsed commits to display categories. Rules, first match wins:

1. Breaking commits always land in the breaking category.
2. A revert whose target is part of the same range cancels out with it;
   neither appears in the output. Breaking targets are never cancelled.
3. Otherwise the commit type is looked up in the label table. Types not
   in ``include_types`` are excluded. Included commits scoped to the
   dependency scope go to the dependency category.

Classification needs the whole parsed set (for revert matching), so it
runs single-threaded after parsing completes.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from release_note.core.commits import KNOWN_TYPES, Commit, CommitType
from release_note.exceptions import ConfigurationError
from release_note.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from release_note.config.models import CommitsConfig

logger = get_logger(__name__)

DEFAULT_CATEGORY_LABELS: dict[str, str] = {
    "feat": "Features",
    "fix": "Bug Fixes",
    "perf": "Performance",
    "refactor": "Refactoring",
    "docs": "Documentation",
    "test": "Tests",
    "build": "Build System",
    "ci": "Continuous Integration",
    "style": "Style",
    "chore": "Chores",
    "unknown": "Other Changes",
}


@dataclass(frozen=True)
class ClassificationRules:
    """Immutable, validated classification settings."""

    include_types: frozenset[str]
    category_labels: Mapping[str, str]
    category_order: tuple[str, ...]
    breaking_label: str = "Breaking Changes"
    dependency_scope: str | None = "deps"
    dependency_label: str = "Dependency Updates"

    @classmethod
    def from_config(cls, config: CommitsConfig) -> ClassificationRules:
        """Validate commit settings and freeze them.

        Raises:
            ConfigurationError: On unknown types or categories, or on
                cyclic or duplicate label mappings
        """
        for token in config.include_types:
            if token not in KNOWN_TYPES:
                raise ConfigurationError(
                    f"include_types: unknown commit type {token!r} "
                    f"(expected one of {', '.join(sorted(KNOWN_TYPES))})"
                )

        labels = dict(DEFAULT_CATEGORY_LABELS)
        for token, label in config.category_labels.items():
            if token not in KNOWN_TYPES:
                raise ConfigurationError(f"category_labels: unknown commit type {token!r}")
            if not label.strip():
                raise ConfigurationError(f"category_labels: empty label for {token!r}")
            if label in KNOWN_TYPES:
                raise ConfigurationError(
                    f"category_labels: label {label!r} for {token!r} refers to a commit type"
                )
            labels[token] = label

        reserved = {
            config.breaking_label: "breaking_label",
            config.dependency_label: "dependency_label",
        }
        if config.breaking_label == config.dependency_label:
            raise ConfigurationError(
                f"dependency_label: {config.dependency_label!r} duplicates breaking_label"
            )

        owners: dict[str, str] = {}
        for token, label in labels.items():
            if label in reserved:
                raise ConfigurationError(
                    f"category_labels: label {label!r} for {token!r} duplicates {reserved[label]}"
                )
            if label in owners:
                raise ConfigurationError(
                    f"category_labels: {token!r} and {owners[label]!r} both map to {label!r}"
                )
            owners[label] = token

        known_categories = {*labels.values(), *reserved}
        if "category_order" in config.model_fields_set:
            seen: set[str] = set()
            for category in config.category_order:
                if category not in known_categories:
                    raise ConfigurationError(f"category_order: unknown category {category!r}")
                if category in seen:
                    raise ConfigurationError(f"category_order: {category!r} listed more than once")
                seen.add(category)
            category_order = tuple(config.category_order)
        else:
            # Relabelled defaults simply fall back to first-seen ordering.
            category_order = tuple(c for c in config.category_order if c in known_categories)

        scope = config.dependency_scope.strip().lower() if config.dependency_scope else None

        return cls(
            include_types=frozenset(config.include_types),
            category_labels=MappingProxyType(labels),
            category_order=category_order,
            breaking_label=config.breaking_label,
            dependency_scope=scope or None,
            dependency_label=config.dependency_label,
        )

    def label_for(self, commit_type: CommitType | str) -> str:
        return self.category_labels[str(commit_type)]


@dataclass(frozen=True)
class ClassifiedEntry:
    """A commit with its resolved display category."""

    commit: Commit
    category: str

    @property
    def id(self) -> str:
        return self.commit.id


@dataclass(frozen=True)
class ClassificationResult:
    """Classifier output.

    Attributes:
        entries: Included entries, in input order
        cancelled: Pairs of ``(revert id, reverted id)`` that cancelled
        excluded: Number of commits dropped by type filtering
    """

    entries: tuple[ClassifiedEntry, ...]
    cancelled: tuple[tuple[str, str], ...] = ()
    excluded: int = 0


def classify(commit: Commit, rules: ClassificationRules) -> ClassifiedEntry | None:
    """Classify a single commit, ignoring revert cancellation.

    Returns:
        The entry, or ``None`` if the commit type is excluded
    """
    if commit.breaking:
        return ClassifiedEntry(commit=commit, category=rules.breaking_label)

    if str(commit.type) not in rules.include_types:
        return None

    if (
        rules.dependency_scope
        and commit.scope
        and commit.scope.lower() == rules.dependency_scope
    ):
        return ClassifiedEntry(commit=commit, category=rules.dependency_label)

    return ClassifiedEntry(commit=commit, category=rules.label_for(commit.type))


def _find_revert_target(
    revert: Commit,
    commits: list[Commit],
    cancelled: set[str],
) -> Commit | None:
    candidates = [
        c
        for c in commits
        if c.id != revert.id
        and c.id not in cancelled
        and not c.breaking
        and c.timestamp <= revert.timestamp
    ]

    target = revert.reverted_id
    if target:
        for candidate in candidates:
            if not candidate.id:
                continue
            if candidate.id.startswith(target) or target.startswith(candidate.id):
                return candidate

    if revert.reverted_subject is not None:
        matches = [c for c in candidates if c.subject_line == revert.reverted_subject]
        if matches:
            # Closest prior commit with that subject.
            return max(matches, key=lambda c: (c.timestamp, c.id))

    return None


def find_cancelled_pairs(commits: Iterable[Commit]) -> list[tuple[Commit, Commit]]:
    """Pair non-breaking reverts with the non-breaking commits they undo.

    Reverts are resolved newest first, so reverting a revert restores the
    original change instead of hiding it.
    """
    commits = list(commits)
    reverts = sorted(
        (c for c in commits if c.is_revert and not c.breaking),
        key=lambda c: (c.timestamp, c.id),
        reverse=True,
    )

    cancelled: set[str] = set()
    pairs: list[tuple[Commit, Commit]] = []
    for revert in reverts:
        if revert.id in cancelled:
            continue
        target = _find_revert_target(revert, commits, cancelled)
        if target is None:
            continue
        cancelled.update((revert.id, target.id))
        pairs.append((revert, target))
        logger.info("revert_cancelled", revert=revert.id, target=target.id)

    return pairs


def classify_commits(commits: Iterable[Commit], rules: ClassificationRules) -> ClassificationResult:
    """Classify a complete parsed commit set.

    Args:
        commits: Every parsed commit of the range
        rules: Validated classification rules

    Returns:
        Included entries plus cancellation and exclusion bookkeeping
    """
    commits = list(commits)
    pairs = find_cancelled_pairs(commits)
    cancelled_ids = {c.id for pair in pairs for c in pair}

    entries: list[ClassifiedEntry] = []
    excluded = 0
    for commit in commits:
        if commit.id in cancelled_ids:
            continue
        entry = classify(commit, rules)
        if entry is None:
            excluded += 1
            logger.debug("commit_excluded", id=commit.id, type=str(commit.type))
            continue
        entries.append(entry)

    counts = Counter(e.category for e in entries)
    logger.info(
        "commits_classified",
        included=len(entries),
        excluded=excluded,
        cancelled=len(cancelled_ids),
        categories=dict(sorted(counts.items())),
    )

    return ClassificationResult(
        entries=tuple(entries),
        cancelled=tuple((revert.id, target.id) for revert, target in pairs),
        excluded=excluded,
    )
