"""Git history retrieval.

Wraps the ``git`` command line to produce :class:`RawCommit` values for a
commit range. Only read-only commands are used.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path

from release_note.core.commits import RawCommit
from release_note.core.version import Version, is_version_tag
from release_note.exceptions import GitError, VersionParseError
from release_note.logging import get_logger

logger = get_logger(__name__)

# Unit and record separators keep multi-line messages intact.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"%H{_FIELD_SEP}%aI{_FIELD_SEP}%an{_FIELD_SEP}%B{_RECORD_SEP}"


class GitRepository:
    """Read-only access to a git repository.

    Args:
        path: Any directory inside the working tree
        tag_prefix: Prefix stripped from release tags (e.g. ``v``)
    """

    def __init__(self, path: Path, tag_prefix: str = "v") -> None:
        self.tag_prefix = tag_prefix
        self.path = Path(self._run("rev-parse", "--show-toplevel", cwd=path))

    def _run(self, *args: str, cwd: Path | None = None) -> str:
        command = ["git", *args]
        logger.debug("git_command", args=list(args))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=True,
                cwd=cwd or self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout.strip()

    def resolve(self, ref: str) -> str:
        """Resolve a reference to a full commit SHA."""
        return self._run("rev-parse", "--verify", f"{ref}^{{commit}}")

    def version_tags(self, from_ref: str = "HEAD") -> list[tuple[str, Version]]:
        """Semantic-version tags reachable from ``from_ref``, highest first."""
        output = self._run("tag", "--merged", from_ref)
        tags = []
        for name in output.splitlines():
            name = name.strip()
            if not name or not is_version_tag(name, self.tag_prefix):
                continue
            try:
                tags.append((name, Version.parse(name.removeprefix(self.tag_prefix))))
            except VersionParseError:
                continue
        return sorted(tags, key=lambda t: t[1], reverse=True)

    def latest_version_tag(self, from_ref: str = "HEAD") -> tuple[str, Version] | None:
        """The closest release tag below ``from_ref``.

        Tags pointing at ``from_ref`` itself are skipped, so running on a
        freshly tagged commit describes that release.
        """
        from_sha = self.resolve(from_ref)
        for name, version in self.version_tags(from_ref):
            if self.resolve(name) != from_sha:
                return name, version
        return None

    def history(self, from_ref: str = "HEAD", to_ref: str | None = None) -> list[RawCommit]:
        """Commits reachable from ``from_ref`` but not from ``to_ref``.

        Args:
            from_ref: Start of the range (inclusive)
            to_ref: End of the range (exclusive); defaults to the latest
                release tag below ``from_ref``, or the root commit

        Returns:
            Raw commits, most recent first
        """
        if to_ref is None:
            latest = self.latest_version_tag(from_ref)
            to_ref = latest[0] if latest else None

        args = ["log", f"--format={_LOG_FORMAT}", from_ref]
        if to_ref is not None:
            args.append(f"^{to_ref}")

        logger.info("scanning_history", from_ref=from_ref, to_ref=to_ref)
        return parse_log_output(self._run(*args))

    def origin_url(self) -> str | None:
        """URL of the ``origin`` remote, if configured."""
        try:
            return self._run("remote", "get-url", "origin") or None
        except GitError:
            return None


def parse_log_output(output: str) -> list[RawCommit]:
    """Parse ``git log`` output produced with the record-separated format."""
    commits = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record:
            continue
        sha, date, author, message = record.split(_FIELD_SEP, 3)
        commits.append(
            RawCommit.from_message(
                id=sha.strip(),
                message=message,
                timestamp=datetime.fromisoformat(date.strip()),
                author=author,
            )
        )
    return commits
