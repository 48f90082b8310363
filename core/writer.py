"""Static HTML report writer."""

import html
import logging
import re
import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .models import ReportRecord

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
STYLESHEET = "index.css"
PLACEHOLDER_PATTERN = re.compile(r"{{\s*(\w+)\s*}}")


@dataclass
class PageContext:
    """Values available to a template while rendering one page."""

    record: ReportRecord
    nav: str = ""
    selected: bool = False


def _escaped(getter: Callable[[PageContext], object]) -> Callable[[PageContext], str]:
    def accessor(context: PageContext) -> str:
        value = getter(context)
        return html.escape(str(value)) if value is not None else ""

    return accessor


# Only these names can appear in templates; content and nav are pre-rendered HTML
PLACEHOLDERS: dict[str, Callable[[PageContext], str]] = {
    "id": _escaped(lambda c: c.record.sequence_id),
    "name": _escaped(lambda c: c.record.dependency_name),
    "url": _escaped(lambda c: c.record.source_url),
    "filename": _escaped(lambda c: c.record.output_filename),
    "current": _escaped(lambda c: c.record.current_version),
    "target": _escaped(lambda c: c.record.target_version),
    "type": _escaped(lambda c: c.record.classification.value),
    "provenance": _escaped(lambda c: c.record.provenance.value),
    "selected_class": lambda c: "selected" if c.selected else "",
    "content": lambda c: c.record.rendered_html,
    "nav": lambda c: c.nav,
}


def render_template(template: str, context: PageContext) -> str:
    """Substitute every ``{{ name }}`` placeholder from the accessor table.

    Raises:
        KeyError: If the template uses a placeholder that has no accessor
    """

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in PLACEHOLDERS:
            raise KeyError(f"Unknown template placeholder: {name}")
        return PLACEHOLDERS[name](context)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def clear_output_directory(output_dir: Path) -> None:
    """Delete and recreate the output directory.

    Refuses to remove the current working directory or any of its parents.
    """
    resolved = output_dir.resolve()
    cwd = Path.cwd().resolve()
    if resolved == cwd or resolved in cwd.parents:
        raise ValueError(f"Refusing to clear {output_dir}: it contains the working directory")

    logger.info("clear output directory %s", output_dir)
    shutil.rmtree(resolved, ignore_errors=True)
    resolved.mkdir(parents=True, exist_ok=True)


def write_report(
    records: list[ReportRecord],
    output_dir: Path,
    templates_dir: Path = TEMPLATES_DIR,
) -> list[Path]:
    """Write one cross-linked page per record plus the shared stylesheet.

    Args:
        records: Report records in navigation order
        output_dir: Existing directory receiving the pages
        templates_dir: Directory holding the templates and stylesheet

    Returns:
        Paths of the written pages
    """
    main_template = (templates_dir / "main-template.html").read_text(encoding="utf-8")
    nav_template = (templates_dir / "nav-template.html").read_text(encoding="utf-8")

    shutil.copyfile(templates_dir / STYLESHEET, output_dir / STYLESHEET)

    written: list[Path] = []
    for record in records:
        logger.info("write %s", record.output_filename)

        nav = "".join(
            render_template(
                nav_template,
                PageContext(record=other, selected=other.sequence_id == record.sequence_id),
            )
            for other in records
        )
        page = render_template(main_template, PageContext(record=record, nav=nav))

        path = output_dir / record.output_filename
        path.write_text(page, encoding="utf-8")
        written.append(path)

    return written
