"""Conventional commit parsing.

Turns raw commits (``type(scope)!: description`` subjects plus footer
lines) into immutable :class:`Commit` records. Parsing never fails:
subjects outside the grammar degrade to the ``unknown`` type with the
whole subject kept as the description.

Revert commits in git's default format (``Revert "feat: add X"``) are
flagged so the classifier can cancel them against the commit they undo.
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from release_note.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

logger = get_logger(__name__)


class CommitType(str, Enum):
    """Recognised conventional commit types."""

    FEAT = "feat"
    FIX = "fix"
    PERF = "perf"
    REFACTOR = "refactor"
    DOCS = "docs"
    CHORE = "chore"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    STYLE = "style"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


KNOWN_TYPES: frozenset[str] = frozenset(t.value for t in CommitType)

# type(scope)!: description
SUBJECT_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z]+)"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<breaking>!)?"
    r":\s+(?P<description>\S.*)$"
)

# "Token: value" or "Token #value"; the breaking token may contain a space.
FOOTER_PATTERN = re.compile(
    r"^(?P<token>BREAKING[ -]CHANGES?|[A-Za-z][\w-]*)"
    r"(?::\s(?P<value>.*)|\s#(?P<ref>.*))$",
    re.IGNORECASE,
)

BREAKING_TOKENS = frozenset({"breaking change", "breaking-change"})

REVERT_PREFIX = 'Revert "'
REVERT_SUBJECT_PATTERN = re.compile(r'^Revert "(?P<subject>.*)"\s*$')
REVERT_BODY_PATTERN = re.compile(r"This reverts commit (?P<id>[0-9a-fA-F]{4,64})")


@dataclass(frozen=True)
class RawCommit:
    """A commit as delivered by the version-control host.

    Attributes:
        id: Opaque unique identifier (usually the full SHA)
        subject: First line of the message
        body: Remaining message text (may be empty)
        timestamp: Author timestamp
        author: Author name, if known
    """

    id: str
    subject: str
    body: str
    timestamp: datetime
    author: str = ""

    @property
    def message(self) -> str:
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject

    @classmethod
    def from_message(
        cls,
        id: str,
        message: str,
        timestamp: datetime,
        author: str = "",
    ) -> RawCommit:
        """Split a full commit message into subject and body."""
        subject, _, body = message.strip("\n").partition("\n")
        return cls(
            id=id,
            subject=subject.strip(),
            body=body.strip("\n"),
            timestamp=timestamp,
            author=author,
        )


@dataclass(frozen=True)
class Commit:
    """A parsed commit.

    ``footers`` keeps message order and may repeat tokens.
    """

    id: str
    subject_line: str
    body_lines: tuple[str, ...]
    type: CommitType
    description: str
    timestamp: datetime
    scope: str | None = None
    breaking: bool = False
    footers: tuple[tuple[str, str], ...] = ()
    is_revert: bool = False
    reverted_subject: str | None = None
    reverted_id: str | None = None
    author: str = ""
    conventional: bool = True

    def footer_values(self, token: str) -> list[str]:
        """Return every value recorded for ``token`` (case-insensitive)."""
        wanted = token.lower()
        return [value for key, value in self.footers if key.lower() == wanted]

    @property
    def breaking_descriptions(self) -> list[str]:
        return [value for key, value in self.footers if key.lower() in BREAKING_TOKENS]


@dataclass(frozen=True)
class ParseFailureSummary:
    """Counts of commits that fell back to the ``unknown`` type."""

    total: int = 0
    unknown: int = 0
    unknown_ids: tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class ParseResult:
    commits: tuple[Commit, ...]
    summary: ParseFailureSummary


_BREAKING_SPELLINGS = ("breaking change", "breaking-change", "breaking changes", "breaking-changes")


def _normalise_token(token: str) -> str:
    if token.lower() in _BREAKING_SPELLINGS:
        return "BREAKING CHANGE" if " " in token else "BREAKING-CHANGE"
    return token


def _match_footer(line: str) -> tuple[str, str] | None:
    match = FOOTER_PATTERN.match(line)
    if not match:
        return None
    token = _normalise_token(match.group("token"))
    if match.group("ref") is not None:
        return token, f"#{match.group('ref').strip()}"
    return token, match.group("value").strip()


def _split_paragraphs(lines: Sequence[str]) -> list[list[str]]:
    paragraphs: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line.rstrip())
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def parse_footers(body_lines: Sequence[str]) -> tuple[tuple[str, str], ...]:
    """Extract footers from a commit body.

    Footers come from the final paragraph when its first line is a
    footer; lines that do not start a new footer continue the previous
    value. Breaking change lines in earlier paragraphs are recorded too.
    """
    paragraphs = _split_paragraphs(body_lines)
    if not paragraphs:
        return ()

    footers: list[tuple[str, str]] = []

    for paragraph in paragraphs[:-1]:
        for line in paragraph:
            footer = _match_footer(line)
            if footer and footer[0].lower() in BREAKING_TOKENS:
                footers.append(footer)

    last = paragraphs[-1]
    if _match_footer(last[0]) is None:
        for line in last:
            footer = _match_footer(line)
            if footer and footer[0].lower() in BREAKING_TOKENS:
                footers.append(footer)
        return tuple(footers)

    for line in last:
        footer = _match_footer(line)
        if footer:
            footers.append(footer)
        else:
            token, value = footers[-1]
            footers[-1] = (token, f"{value}\n{line.strip()}".strip())

    return tuple(footers)


def _parse_revert(subject: str, body: str) -> tuple[bool, str | None, str | None]:
    is_revert = subject.startswith(REVERT_PREFIX) or body.lstrip().startswith(REVERT_PREFIX)
    if not is_revert:
        return False, None, None

    reverted_subject = None
    for candidate in (subject, body.lstrip().split("\n", 1)[0]):
        match = REVERT_SUBJECT_PATTERN.match(candidate.strip())
        if match:
            reverted_subject = match.group("subject")
            break

    id_match = REVERT_BODY_PATTERN.search(body)
    reverted_id = id_match.group("id") if id_match else None

    return True, reverted_subject, reverted_id


def parse_commit(raw: RawCommit) -> Commit:
    """Parse one raw commit into a :class:`Commit`.

    Args:
        raw: Commit as retrieved from version control

    Returns:
        Parsed commit; subjects outside the grammar become ``unknown``
    """
    subject = raw.subject.strip()
    body_lines = tuple(raw.body.splitlines()) if raw.body else ()
    footers = parse_footers(body_lines)
    footer_breaking = any(key.lower() in BREAKING_TOKENS for key, _ in footers)
    is_revert, reverted_subject, reverted_id = _parse_revert(subject, raw.body or "")

    match = SUBJECT_PATTERN.match(subject)
    if match is None:
        return Commit(
            id=raw.id,
            subject_line=subject,
            body_lines=body_lines,
            type=CommitType.UNKNOWN,
            description=subject,
            timestamp=raw.timestamp,
            breaking=footer_breaking,
            footers=footers,
            is_revert=is_revert,
            reverted_subject=reverted_subject,
            reverted_id=reverted_id,
            author=raw.author,
            conventional=False,
        )

    token = match.group("type").lower()
    commit_type = CommitType(token) if token in KNOWN_TYPES else CommitType.UNKNOWN
    scope = (match.group("scope") or "").strip() or None

    return Commit(
        id=raw.id,
        subject_line=subject,
        body_lines=body_lines,
        type=commit_type,
        description=match.group("description").strip(),
        timestamp=raw.timestamp,
        scope=scope,
        breaking=bool(match.group("breaking")) or footer_breaking,
        footers=footers,
        is_revert=is_revert,
        reverted_subject=reverted_subject,
        reverted_id=reverted_id,
        author=raw.author,
    )


def parse_commits(raws: Iterable[RawCommit], *, workers: int = 1) -> ParseResult:
    """Parse a batch of raw commits.

    Commits are independent, so ``workers > 1`` spreads them over a
    thread pool. Output order carries no meaning; the grouper imposes
    the final ordering.

    Args:
        raws: Raw commits in any order
        workers: Number of parser threads

    Returns:
        Parsed commits plus a summary of unknown-type fallbacks
    """
    raws = list(raws)

    if workers > 1 and len(raws) > 1:
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="release-note-parse"
        ) as pool:
            commits = tuple(pool.map(parse_commit, raws))
    else:
        commits = tuple(parse_commit(raw) for raw in raws)

    unknown_ids = tuple(c.id for c in commits if c.type == CommitType.UNKNOWN)
    summary = ParseFailureSummary(
        total=len(commits), unknown=len(unknown_ids), unknown_ids=unknown_ids
    )

    logger.info("commits_parsed", total=summary.total, unknown=summary.unknown, workers=workers)
    return ParseResult(commits=commits, summary=summary)


def filter_skip_release_commits(
    raws: Iterable[RawCommit],
    patterns: Sequence[str],
) -> list[RawCommit]:
    """Drop commits whose message contains a skip-release marker.

    Markers are matched case-insensitively anywhere in the message.
    """
    raws = list(raws)
    if not patterns:
        return raws

    lowered = [p.lower() for p in patterns]
    kept = []
    for raw in raws:
        message = raw.message.lower()
        if any(p in message for p in lowered):
            logger.debug("commit_skipped", id=raw.id)
            continue
        kept.append(raw)
    return kept
