"""Tests for forge detection."""

from __future__ import annotations

import pytest

from release_note.config.models import RenderConfig
from release_note.platform import Platform, PlatformKind, parse_git_url


class TestParseGitUrl:
    """Tests for parse_git_url()."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/owner/repo.git", ("github.com", "owner", "repo")),
            ("https://github.com/owner/repo", ("github.com", "owner", "repo")),
            ("git@github.com:owner/repo.git", ("github.com", "owner", "repo")),
            (
                "https://gitlab.com/group/subgroup/project.git",
                ("gitlab.com", "group/subgroup", "project"),
            ),
        ],
    )
    def test_valid_urls(self, url, expected):
        """HTTPS and SSH URLs are split into host, owner and repo."""
        assert parse_git_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        ["ftp://example.com/a/b", "https://github.com/owner", "git@github.com", "/tmp/repo"],
    )
    def test_invalid_urls(self, url):
        """Unsupported or incomplete URLs raise ValueError."""
        with pytest.raises(ValueError):
            parse_git_url(url)


class TestDetect:
    """Tests for Platform.detect()."""

    def test_github_origin(self):
        """A github.com remote is detected as GitHub."""
        platform = Platform.detect("git@github.com:acme/widgets.git", env={})

        assert platform.kind == PlatformKind.GITHUB
        assert platform.url == "https://github.com/acme/widgets"
        assert platform.commit_link_template == "https://github.com/acme/widgets/commit/{id}"

    def test_gitlab_origin(self):
        """A gitlab.com remote is detected as GitLab."""
        platform = Platform.detect("https://gitlab.com/acme/tools/widgets.git", env={})

        assert platform.kind == PlatformKind.GITLAB
        assert platform.reference_link_template == (
            "https://gitlab.com/acme/tools/widgets/-/issues/{reference}"
        )

    def test_unknown_host(self):
        """Other hosts produce no link templates."""
        platform = Platform.detect("https://git.example.com/acme/widgets.git", env={})

        assert platform.kind == PlatformKind.UNKNOWN
        assert platform.commit_link_template is None

    def test_no_origin(self):
        """Missing remotes are not an error."""
        assert Platform.detect(None, env={}) == Platform.unknown()

    def test_unparseable_origin(self):
        """Local path remotes are treated as unknown."""
        assert Platform.detect("/srv/git/widgets.git", env={}).kind == PlatformKind.UNKNOWN

    def test_github_actions_env_wins(self):
        """CI environment takes priority over the remote URL."""
        env = {
            "GITHUB_ACTIONS": "true",
            "GITHUB_REPOSITORY": "acme/widgets",
            "GITHUB_SERVER_URL": "https://github.example.com/",
        }
        platform = Platform.detect("https://gitlab.com/other/repo.git", env=env)

        assert platform == Platform(PlatformKind.GITHUB, "https://github.example.com/acme/widgets")

    def test_gitlab_ci_env(self):
        """GitLab CI exposes the project URL directly."""
        env = {"GITLAB_CI": "true", "CI_PROJECT_URL": "https://gitlab.example.com/acme/widgets"}

        assert Platform.detect(None, env=env).kind == PlatformKind.GITLAB


class TestApplyDefaults:
    """Tests for Platform.apply_defaults()."""

    def test_fills_missing_templates(self):
        """Unset link templates are filled from the platform."""
        platform = Platform(PlatformKind.GITHUB, "https://github.com/acme/widgets")
        render = platform.apply_defaults(RenderConfig())

        assert render.commit_link_template == "https://github.com/acme/widgets/commit/{id}"
        assert render.reference_link_template == (
            "https://github.com/acme/widgets/issues/{reference}"
        )

    def test_configured_templates_kept(self):
        """Configured templates are never overwritten."""
        platform = Platform(PlatformKind.GITHUB, "https://github.com/acme/widgets")
        render = platform.apply_defaults(RenderConfig(commit_link_template="https://x/{id}"))

        assert render.commit_link_template == "https://x/{id}"

    def test_unknown_platform_is_noop(self):
        """Unknown platforms leave the configuration untouched."""
        render = RenderConfig()

        assert Platform.unknown().apply_defaults(render) is render
