"""Release note rendering via Jinja2 templates.

Each format (``markdown``, ``text``) has a built-in template; callers may
supply their own Jinja2 source instead. ``json`` bypasses templates and
serialises :meth:`ReleaseNote.to_dict`.

Templates receive the following context:

- ``note``: the :class:`ReleaseNote`
- ``groups``: non-empty groups in display order
- ``entries``: every entry, flattened in group order
- ``version`` / ``previous_version``: :class:`Version` values
- ``bump``: the :class:`BumpType`
- ``generated_at``: datetime; ``date``: ``YYYY-MM-DD`` string
- ``heading_level`` / ``title_level`` / ``show_title`` / ``empty_message``

plus the ``heading()`` global and the ``entry_line``, ``commit_ref``,
``references``, ``short_id``, ``unwrap`` and ``date`` filters.

Undefined names are errors (StrictUndefined). Any template failure is
raised as :class:`TemplateError` before any output is returned.
"""

from __future__ import annotations

import json
import re
import traceback
from typing import TYPE_CHECKING

import jinja2

from release_note.config.models import RenderConfig
from release_note.exceptions import TemplateError
from release_note.logging import get_logger

if TYPE_CHECKING:
    from datetime import datetime

    from release_note.core.classifier import ClassifiedEntry
    from release_note.core.notes import ReleaseNote

logger = get_logger(__name__)

TEMPLATE_NAME = "<template>"

MARKDOWN_TEMPLATE = """\
{% if show_title %}
{{ heading(version ~ " (" ~ date ~ ")", title_level) }}

{% endif %}
{% for group in groups %}
{{ heading(group.category, heading_level) }}

{% for entry in group.entries %}
- {{ entry | entry_line }}
{% endfor %}
{% if not loop.last %}

{% endif %}
{% else %}
{{ empty_message }}
{% endfor %}
"""

TEXT_TEMPLATE = """\
{% if show_title %}
{{ heading("Release " ~ version ~ " (" ~ date ~ ")", title_level) }}

{% endif %}
{% for group in groups %}
{{ heading(group.category, heading_level) }}

{% for entry in group.entries %}
  * {{ entry | entry_line }}
{% endfor %}
{% if not loop.last %}

{% endif %}
{% else %}
{{ empty_message }}
{% endfor %}
"""

BUILTIN_TEMPLATES = {
    "markdown": MARKDOWN_TEMPLATE,
    "text": TEXT_TEMPLATE,
}

_REFERENCE_SPLIT = re.compile(r"[,\s]+")
_REFERENCE_ITEM = re.compile(r"^#?(?P<ref>[\w./-]+)$")


def unwrap(text: str) -> str:
    """Join hard-wrapped lines within each paragraph."""
    paragraphs = re.split(r"\n\s*\n", text.strip())
    return "\n\n".join(" ".join(line.strip() for line in p.splitlines()) for p in paragraphs)


def _directive_at(source: str, lineno: int | None) -> str | None:
    if not lineno:
        return None
    lines = source.splitlines()
    if 0 < lineno <= len(lines):
        return lines[lineno - 1].strip()
    return None


def _template_lineno(exc: BaseException) -> int | None:
    # Jinja2 rewrites tracebacks so template frames carry the template name.
    lineno = None
    for frame in traceback.extract_tb(exc.__traceback__):
        if frame.filename == TEMPLATE_NAME:
            lineno = frame.lineno
    return lineno


class Renderer:
    """Renders a :class:`ReleaseNote` into a document.

    Args:
        config: Rendering settings (defaults when omitted)
        template: Jinja2 source overriding ``config.template``
    """

    def __init__(self, config: RenderConfig | None = None, *, template: str | None = None) -> None:
        self.config = config or RenderConfig()
        self.format = self.config.format
        if template is None:
            template = self.config.template
        self.custom_template = template is not None
        self.source = template if template is not None else BUILTIN_TEMPLATES.get(self.format, "")
        self._reference_tokens = {t.lower() for t in self.config.reference_tokens}
        self.environment = self._build_environment()

    def _build_environment(self) -> jinja2.Environment:
        env = jinja2.Environment(
            undefined=jinja2.StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.globals["heading"] = self.heading
        env.filters["entry_line"] = self.entry_line
        env.filters["commit_ref"] = self.commit_ref
        env.filters["references"] = self.references
        env.filters["short_id"] = self.short_id
        env.filters["unwrap"] = unwrap
        env.filters["date"] = _format_date
        return env

    # -------------------------------------------------------------------------
    # Template helpers
    # -------------------------------------------------------------------------

    def heading(self, text: str, level: int) -> str:
        """Render a heading at ``level`` for the current format."""
        if self.format == "text":
            underline = "=" if level <= 1 else "-"
            return f"{text}\n{underline * len(text)}"
        return f"{'#' * level} {text}"

    def short_id(self, commit_id: str) -> str:
        return commit_id[: self.config.short_id_length]

    def _format_link(self, template: str, **values: str) -> str:
        try:
            return template.format(**values)
        except (KeyError, IndexError, ValueError) as e:
            raise TemplateError(f"Invalid link template ({e})", directive=template) from e

    def commit_ref(self, entry: ClassifiedEntry) -> str:
        """Render the shortened commit id, linked when a commit URL is configured."""
        short = self.short_id(entry.commit.id)
        if self.format == "text":
            return short
        if self.config.commit_link_template:
            url = self._format_link(
                self.config.commit_link_template, id=entry.commit.id, short_id=short
            )
            return f"[{short}]({url})"
        return f"`{short}`"

    def references(self, entry: ClassifiedEntry) -> list[str]:
        """Render issue references from the entry's reference footers."""
        rendered: list[str] = []
        seen: set[str] = set()

        for token, value in entry.commit.footers:
            if token.lower() not in self._reference_tokens:
                continue
            for item in _REFERENCE_SPLIT.split(value):
                match = _REFERENCE_ITEM.match(item)
                if not match:
                    continue
                ref = match.group("ref")
                if ref in seen:
                    continue
                seen.add(ref)
                label = f"#{ref}" if item.startswith("#") or ref.isdigit() else ref
                if self.format == "markdown" and self.config.reference_link_template:
                    url = self._format_link(self.config.reference_link_template, reference=ref)
                    rendered.append(f"[{label}]({url})")
                else:
                    rendered.append(label)

        return rendered

    def entry_line(self, entry: ClassifiedEntry) -> str:
        """Render one entry: scope, description, commit reference and issue references."""
        commit = entry.commit
        if self.format == "text":
            scope = f"({commit.scope}) " if commit.scope else ""
            line = f"{scope}{commit.description} [{self.commit_ref(entry)}]"
        else:
            scope = f"**({commit.scope})** " if commit.scope else ""
            line = f"{scope}{commit.description} ({self.commit_ref(entry)})"

        refs = self.references(entry)
        if refs:
            line += " " + ", ".join(refs)
        return line

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def compile(self) -> jinja2.Template:
        """Compile the template source.

        Raises:
            TemplateError: On template syntax errors
        """
        try:
            return self.environment.from_string(self.source)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateError(
                f"Invalid template syntax: {e.message}",
                directive=_directive_at(self.source, e.lineno),
                lineno=e.lineno,
            ) from e

    def context(self, note: ReleaseNote) -> dict[str, object]:
        title_level = max(1, self.config.heading_level - 1)
        return {
            "note": note,
            "groups": note.groups,
            "entries": note.entries,
            "version": note.recommended_version,
            "previous_version": note.previous_version,
            "bump": note.bump,
            "generated_at": note.generated_at,
            "date": note.generated_at.strftime("%Y-%m-%d"),
            "heading_level": self.config.heading_level,
            "title_level": title_level,
            "show_title": self.config.show_title,
            "empty_message": self.config.empty_message,
        }

    def render(self, note: ReleaseNote) -> str:
        """Render the note into the final document.

        Raises:
            TemplateError: If the template is malformed
        """
        if self.format == "json":
            if self.custom_template:
                logger.debug("template_ignored", format=self.format)
            document = json.dumps(note.to_dict(), indent=2) + "\n"
        else:
            template = self.compile()
            try:
                document = template.render(self.context(note))
            except TemplateError:
                raise
            except jinja2.TemplateError as e:
                lineno = getattr(e, "lineno", None) or _template_lineno(e)
                raise TemplateError(
                    f"Template rendering failed: {e}",
                    directive=_directive_at(self.source, lineno),
                    lineno=lineno,
                ) from e
            except (TypeError, ValueError, ArithmeticError, LookupError, AttributeError) as e:
                lineno = _template_lineno(e)
                raise TemplateError(
                    f"Template rendering failed: {e}",
                    directive=_directive_at(self.source, lineno),
                    lineno=lineno,
                ) from e

        logger.info("release_note_rendered", format=self.format, groups=len(note.groups))
        return document

    def render_lines(self, note: ReleaseNote) -> list[str]:
        """Render the note as a list of lines."""
        return self.render(note).splitlines()


def _format_date(value: datetime, fmt: str = "%Y-%m-%d") -> str:
    return value.strftime(fmt)


def check_template(source: str) -> None:
    """Check template syntax without rendering.

    Raises:
        TemplateError: On template syntax errors
    """
    Renderer(template=source).compile()
