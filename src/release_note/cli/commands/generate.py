"""Implementation of the release note generation command.

Reads the commit range from git, runs the pipeline and prints the
document to stdout. Nothing in the repository is modified.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from release_note.config import load_config_or_default
from release_note.core.pipeline import generate_release_note
from release_note.core.version import is_version_tag
from release_note.exceptions import ReleaseNoteError
from release_note.platform import Platform
from release_note.templates import TemplateResolver, load_template
from release_note.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_generate(
    path: str | None,
    from_ref: str | None,
    to_ref: str | None,
    previous_version: str | None,
    output_format: str | None,
    template_path: str | None,
    workers: int | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the generate command.

    Args:
        path: Optional path to the repository
        from_ref: Start of the range (inclusive, defaults to HEAD)
        to_ref: End of the range (exclusive, defaults to the previous release tag)
        previous_version: Explicit previous version, overriding tag detection
        output_format: Output format override
        template_path: Template file overriding discovery
        workers: Parser thread count override
        console: Console for the rendered document
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config_or_default(project_path)
    except ReleaseNoteError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    overrides: dict[str, object] = {}
    if workers is not None:
        overrides["workers"] = workers
    render_updates: dict[str, object] = {}
    if output_format is not None:
        render_updates["format"] = output_format

    try:
        repo = GitRepository(project_path, tag_prefix=config.tag_prefix)
    except ReleaseNoteError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    try:
        if template_path is not None:
            template = load_template(Path(template_path))
        elif config.render.template is None:
            template = TemplateResolver(repo.path).resolve()
        else:
            template = None

        platform = Platform.detect(repo.origin_url())
        render = platform.apply_defaults(config.render.model_copy(update=render_updates))
        config = config.model_copy(update={**overrides, "render": render})

        start = from_ref or "HEAD"
        end = to_ref
        if end is None:
            latest = repo.latest_version_tag(start)
            end = latest[0] if latest else None
            if previous_version is None and latest is not None:
                previous_version = str(latest[1])
        elif previous_version is None and is_version_tag(end, config.tag_prefix):
            previous_version = end.removeprefix(config.tag_prefix)

        commits = repo.history(start, end)
        result = generate_release_note(commits, previous_version, config, template=template)
    except ReleaseNoteError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if result.summary.unknown:
        err_console.print(
            f"[dim]{result.summary.unknown} of {result.summary.total} commits "
            "did not follow the conventional commit format[/]"
        )

    console.print(result.document, end="", markup=False, highlight=False, soft_wrap=True)
