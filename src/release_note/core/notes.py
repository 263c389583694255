"""Release note data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from release_note.core.commits import ParseFailureSummary
from release_note.core.version import BumpType, Version

if TYPE_CHECKING:
    from release_note.core.classifier import ClassifiedEntry


@dataclass(frozen=True)
class ReleaseGroup:
    """One category section: a heading and its entries, newest first."""

    category: str
    entries: tuple[ClassifiedEntry, ...]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class ReleaseNote:
    """The grouped, versioned result of one invocation.

    Attributes:
        previous_version: Version the range starts from
        recommended_version: Suggested next version (never lower)
        bump: Increment that produced ``recommended_version``
        groups: Non-empty category groups in display order
        generated_at: When the note was built, not any commit time
        summary: Parser fallback counts
    """

    previous_version: Version
    recommended_version: Version
    bump: BumpType
    groups: tuple[ReleaseGroup, ...]
    generated_at: datetime
    summary: ParseFailureSummary = ParseFailureSummary()

    @property
    def is_empty(self) -> bool:
        return not self.groups

    @property
    def entries(self) -> list[ClassifiedEntry]:
        return [entry for group in self.groups for entry in group.entries]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation.

        Only the generation date is included, matching the built-in titles.
        """
        return {
            "previous_version": str(self.previous_version),
            "recommended_version": str(self.recommended_version),
            "bump": str(self.bump),
            "date": self.generated_at.strftime("%Y-%m-%d"),
            "groups": [
                {
                    "category": group.category,
                    "entries": [
                        {
                            "id": entry.commit.id,
                            "type": str(entry.commit.type),
                            "scope": entry.commit.scope,
                            "description": entry.commit.description,
                            "breaking": entry.commit.breaking,
                            "timestamp": entry.commit.timestamp.isoformat(),
                            "footers": [[key, value] for key, value in entry.commit.footers],
                        }
                        for entry in group.entries
                    ],
                }
                for group in self.groups
            ],
            "summary": {
                "total": self.summary.total,
                "unknown": self.summary.unknown,
            },
        }
