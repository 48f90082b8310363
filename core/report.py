"""Report record assembly."""

from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin

from .models import ChangelogResult, DependencyRequest, ReportRecord
from .semver import classify_upgrade

PATH_SEPARATORS = ("/", "\\")

# GitHub flavor with hard line breaks; raw HTML from third-party changelogs is escaped
_markdown = MarkdownIt("gfm-like", {"breaks": True, "html": False}).use(tasklists_plugin)


def render_markdown(text: str) -> str:
    """Convert changelog markdown to HTML with code blocks tagged for styling."""
    html = _markdown.render(text)
    return html.replace("<pre><code", '<pre class="code"><code')


def output_filename(name: str, current_version: str, target_version: str) -> str:
    """File name of a dependency page, safe to place inside the output directory."""
    filename = f"{name}_{current_version}-{target_version}.html"
    for separator in PATH_SEPARATORS:
        filename = filename.replace(separator, "-")
    return filename


def build_record(
    sequence_id: int,
    request: DependencyRequest,
    changelog: ChangelogResult,
    source_url: str | None,
) -> ReportRecord:
    """Assemble the report record for one dependency."""
    return ReportRecord(
        sequence_id=sequence_id,
        dependency_name=request.name,
        source_url=source_url,
        output_filename=output_filename(
            request.name, request.current_version, request.target_version
        ),
        rendered_html=render_markdown(changelog.text),
        current_version=request.current_version,
        target_version=request.target_version,
        classification=classify_upgrade(request.current_version, request.target_version),
        provenance=changelog.provenance,
    )


def ensure_unique_filenames(records: list[ReportRecord]) -> list[ReportRecord]:
    """Suffix colliding output filenames with -2, -3, ... in record order."""
    seen: set[str] = set()
    for record in records:
        filename = record.output_filename
        stem = filename[: -len(".html")] if filename.endswith(".html") else filename
        counter = 1
        while filename in seen:
            counter += 1
            filename = f"{stem}-{counter}.html"
        record.output_filename = filename
        seen.add(filename)
    return records
