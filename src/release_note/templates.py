"""Discovery of project-specific release note templates."""

from __future__ import annotations

from pathlib import Path

from release_note.core.renderer import check_template
from release_note.exceptions import TemplateError
from release_note.logging import get_logger

logger = get_logger(__name__)

TEMPLATE_FILENAME = "release-note.j2"

# Searched in order; the first existing file wins.
TEMPLATE_CANDIDATES = (
    Path(TEMPLATE_FILENAME),
    Path(".github") / TEMPLATE_FILENAME,
    Path(".gitlab") / TEMPLATE_FILENAME,
)


class TemplateResolver:
    """Locates a custom template in a project directory."""

    def __init__(self, working_dir: Path) -> None:
        self.working_dir = working_dir

    def candidates(self) -> list[Path]:
        return [self.working_dir / candidate for candidate in TEMPLATE_CANDIDATES]

    def resolve(self) -> str | None:
        """Return the custom template source, or ``None`` for the built-in one.

        Raises:
            TemplateError: If the template cannot be read or does not compile
        """
        for path in self.candidates():
            if path.is_file():
                source = load_template(path)
                logger.info("custom_template", path=str(path))
                return source
        return None


def load_template(path: Path) -> str:
    """Read and syntax-check a template file.

    Raises:
        TemplateError: If the file is unreadable or has invalid syntax
    """
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateError(f"failed to read template: {path}") from e

    try:
        check_template(source)
    except TemplateError as e:
        raise TemplateError(
            f"invalid template syntax in {path}",
            directive=e.directive,
            lineno=e.lineno,
        ) from e
    return source
