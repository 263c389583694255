"""Forge detection for commit and issue links.

Recognises GitHub and GitLab from CI environment variables or from the
``origin`` remote URL, and supplies link templates for the renderer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from release_note.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from release_note.config.models import RenderConfig

logger = get_logger(__name__)


class PlatformKind(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Platform:
    """A detected code forge.

    Attributes:
        kind: Which forge hosts the repository
        url: Web URL of the repository (empty when unknown)
    """

    kind: PlatformKind
    url: str = ""

    @classmethod
    def unknown(cls) -> Platform:
        return cls(PlatformKind.UNKNOWN)

    @classmethod
    def detect(cls, origin_url: str | None, env: Mapping[str, str] | None = None) -> Platform:
        """Detect the forge, preferring CI environment over the remote URL."""
        env = os.environ if env is None else env

        platform = cls.from_ci_env(env)
        if platform is not None:
            return platform

        if origin_url is None:
            logger.warning("no_origin_url", hint="commit links disabled")
            return cls.unknown()

        return cls.from_origin_url(origin_url)

    @classmethod
    def from_ci_env(cls, env: Mapping[str, str]) -> Platform | None:
        if env.get("GITLAB_CI") and env.get("CI_PROJECT_URL"):
            return cls(PlatformKind.GITLAB, env["CI_PROJECT_URL"].rstrip("/"))

        if env.get("GITHUB_ACTIONS") and env.get("GITHUB_REPOSITORY"):
            server = env.get("GITHUB_SERVER_URL", "https://github.com").rstrip("/")
            return cls(PlatformKind.GITHUB, f"{server}/{env['GITHUB_REPOSITORY']}")

        return None

    @classmethod
    def from_origin_url(cls, origin_url: str) -> Platform:
        try:
            host, owner, repo = parse_git_url(origin_url)
        except ValueError as e:
            logger.warning("unparseable_origin_url", url=origin_url, error=str(e))
            return cls.unknown()

        url = f"https://{host}/{owner}/{repo}"
        if "github" in host:
            return cls(PlatformKind.GITHUB, url)
        if "gitlab" in host:
            return cls(PlatformKind.GITLAB, url)
        return cls.unknown()

    @property
    def commit_link_template(self) -> str | None:
        if self.kind == PlatformKind.GITHUB:
            return f"{self.url}/commit/{{id}}"
        if self.kind == PlatformKind.GITLAB:
            return f"{self.url}/-/commit/{{id}}"
        return None

    @property
    def reference_link_template(self) -> str | None:
        if self.kind == PlatformKind.GITHUB:
            return f"{self.url}/issues/{{reference}}"
        if self.kind == PlatformKind.GITLAB:
            return f"{self.url}/-/issues/{{reference}}"
        return None

    def apply_defaults(self, render: RenderConfig) -> RenderConfig:
        """Fill in link templates the configuration leaves unset."""
        updates = {}
        if render.commit_link_template is None and self.commit_link_template:
            updates["commit_link_template"] = self.commit_link_template
        if render.reference_link_template is None and self.reference_link_template:
            updates["reference_link_template"] = self.reference_link_template
        return render.model_copy(update=updates) if updates else render


def parse_git_url(url: str) -> tuple[str, str, str]:
    """Split an HTTPS or SSH remote URL into ``(host, owner, repo)``.

    Nested groups are kept in ``owner`` (``group/subgroup``).

    Raises:
        ValueError: If the URL is not ``https://`` or ``git@`` or lacks owner/repo
    """
    if url.startswith("https://"):
        host, sep, path = url.removeprefix("https://").partition("/")
    elif url.startswith("git@"):
        host, sep, path = url.removeprefix("git@").partition(":")
    else:
        raise ValueError(f"URL must start with 'https://' or 'git@': {url}")

    if not sep:
        raise ValueError(f"Invalid repository URL: {url}")

    path = path.removesuffix(".git")
    segments = [s for s in path.split("/") if s]
    if len(segments) < 2:
        raise ValueError(f"Invalid repository path {path!r}. Expected at least 'owner/repo'")

    return host, "/".join(segments[:-1]), segments[-1]
