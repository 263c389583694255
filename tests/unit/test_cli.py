"""Tests for the release-note command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from release_note import __version__
from release_note.cli.main import build_parser, main


@pytest.fixture(autouse=True)
def no_ci_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("GITHUB_ACTIONS", "GITHUB_REPOSITORY", "GITLAB_CI", "CI_PROJECT_URL"):
        monkeypatch.delenv(name, raising=False)


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Everything is optional."""
        args = build_parser().parse_args([])

        assert args.from_ref is None
        assert args.to_ref is None
        assert args.output_format is None
        assert args.workers is None

    def test_range_and_options(self):
        """Positional range and overrides are parsed."""
        args = build_parser().parse_args(
            ["HEAD", "v1.0.0", "--format", "json", "--workers", "4", "--previous-version", "none"]
        )

        assert (args.from_ref, args.to_ref) == ("HEAD", "v1.0.0")
        assert args.output_format == "json"
        assert args.workers == 4
        assert args.previous_version == "none"

    def test_workers_must_be_positive(self):
        """Zero workers is rejected."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--workers", "0"])

    def test_version_flag(self, capsys):
        """--version prints the package version."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])

        assert __version__ in capsys.readouterr().out


class TestGenerate:
    """End-to-end runs against a temporary repository."""

    def test_markdown_since_latest_tag(self, temp_git_repo_with_pyproject: Path, capsys):
        """The default range covers commits since the previous release tag."""
        exit_code = main(["--path", str(temp_git_repo_with_pyproject), "-q"])
        out = capsys.readouterr().out

        assert exit_code == 0
        assert out.startswith("### Features\n\n- **(api)** add search endpoint (`")
        assert "#7" in out
        assert "### Bug Fixes\n\n- null pointer on empty query (`" in out
        assert "initial commit" not in out

    def test_json_uses_tag_as_previous_version(self, temp_git_repo_with_pyproject: Path, capsys):
        """The previous release tag supplies the previous version."""
        exit_code = main(
            ["--path", str(temp_git_repo_with_pyproject), "--format", "json", "-q"]
        )
        data = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert data["previous_version"] == "1.2.3"
        assert data["recommended_version"] == "1.3.0"

    def test_explicit_previous_version(self, temp_git_repo_with_pyproject: Path, capsys):
        """--previous-version overrides tag detection."""
        main(
            [
                "--path",
                str(temp_git_repo_with_pyproject),
                "--format",
                "json",
                "--previous-version",
                "2.0.0",
                "-q",
            ]
        )
        data = json.loads(capsys.readouterr().out)

        assert data["recommended_version"] == "2.1.0"

    def test_explicit_tag_range(self, temp_git_repo_with_pyproject: Path, capsys):
        """A version tag as TO implies the previous version."""
        main(
            ["HEAD", "v1.2.3", "--path", str(temp_git_repo_with_pyproject), "--format", "json"]
        )
        data = json.loads(capsys.readouterr().out)

        assert data["previous_version"] == "1.2.3"
        assert len(data["groups"]) == 2

    def test_project_template(self, temp_git_repo_with_pyproject: Path, capsys):
        """A release-note.j2 in the repository root is used."""
        (temp_git_repo_with_pyproject / "release-note.j2").write_text(
            "{{ previous_version }} -> {{ version }}\n"
        )

        main(["--path", str(temp_git_repo_with_pyproject), "-q"])

        assert capsys.readouterr().out == "1.2.3 -> 1.3.0\n"

    def test_origin_links(self, temp_git_repo_with_pyproject: Path, git, capsys):
        """GitHub remotes enable commit and issue links."""
        git(
            temp_git_repo_with_pyproject,
            "remote",
            "add",
            "origin",
            "git@github.com:acme/widgets.git",
        )

        main(["--path", str(temp_git_repo_with_pyproject), "-q"])
        out = capsys.readouterr().out

        assert "https://github.com/acme/widgets/commit/" in out
        assert "[#7](https://github.com/acme/widgets/issues/7)" in out


class TestErrors:
    """Failures exit with status 1 and print to stderr."""

    def test_invalid_previous_version(self, temp_git_repo_with_pyproject: Path, capsys):
        """A malformed previous version is reported."""
        exit_code = main(
            ["--path", str(temp_git_repo_with_pyproject), "--previous-version", "one", "-q"]
        )
        captured = capsys.readouterr()

        assert exit_code == 1
        assert captured.out == ""
        assert "Invalid semantic version" in captured.err

    def test_broken_template(self, temp_git_repo_with_pyproject: Path, tmp_path: Path, capsys):
        """A malformed template produces no document."""
        template = tmp_path / "broken.j2"
        template.write_text("{% for x in %}")

        exit_code = main(
            ["--path", str(temp_git_repo_with_pyproject), "--template", str(template), "-q"]
        )
        captured = capsys.readouterr()

        assert exit_code == 1
        assert captured.out == ""
        assert "invalid template syntax" in captured.err

    def test_undecodable_template(
        self, temp_git_repo_with_pyproject: Path, tmp_path: Path, capsys
    ):
        """A template that is not UTF-8 is reported, not a traceback."""
        template = tmp_path / "latin1.j2"
        template.write_bytes(b"{{ version }} caf\xe9\n")

        exit_code = main(
            ["--path", str(temp_git_repo_with_pyproject), "--template", str(template), "-q"]
        )
        captured = capsys.readouterr()

        assert exit_code == 1
        assert captured.out == ""
        assert "failed to read template" in captured.err

    def test_invalid_config(self, temp_git_repo_with_pyproject: Path, capsys):
        """Unknown include types fail before any output."""
        (temp_git_repo_with_pyproject / "pyproject.toml").write_text(
            '[tool.release-note.commits]\ninclude_types = ["feature"]\n'
        )

        exit_code = main(["--path", str(temp_git_repo_with_pyproject), "-q"])
        captured = capsys.readouterr()

        assert exit_code == 1
        assert captured.out == ""

    def test_not_a_repository(self, tmp_path: Path, capsys):
        """Running outside a git repository fails cleanly."""
        exit_code = main(["--path", str(tmp_path), "-q"])

        assert exit_code == 1
        assert "Error" in capsys.readouterr().err
