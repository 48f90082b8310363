"""CLI application for outdated-changelog."""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from core.errors import LockfileError, OutdatedCommandFailed
from core.github import DEFAULT_BRANCH
from core.models import Lockfile, Provenance
from core.outdated import get_outdated_dependencies
from core.parse_node import parse_lockfile
from core.pipeline import collect_changelogs
from core.resolve_node import DEFAULT_REGISTRY_URL
from core.writer import clear_output_directory, write_report

console = Console()

DEFAULT_OUTPUT_DIR = Path("reports/outdated-changelogs")


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[changelog] %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def read_lockfile(path: Path) -> Lockfile:
    """Read and parse a package-lock.json file."""
    if not path.exists():
        raise LockfileError(f"Lockfile {path} not found")
    return parse_lockfile(path.read_text(encoding="utf-8"))


app = typer.Typer(
    name="outdated-changelog",
    help="outdated-changelog - Build an HTML report of changelogs for outdated npm dependencies",
    add_completion=False,
)


@app.command()
def report(
    project_dir: Path = typer.Argument(Path("."), help="Project directory containing package.json and package-lock.json"),
    output: Path = typer.Option(DEFAULT_OUTPUT_DIR, "--out", "-o", help="Report output directory (cleared on each run)"),
    lockfile: Path | None = typer.Option(None, "--lockfile", help="Path to package-lock.json"),
    delay: float = typer.Option(1.0, "--delay", min=0.0, help="Seconds to wait between dependencies"),
    timeout: float = typer.Option(30.0, "--timeout", min=0.1, help="Request timeout in seconds"),
    branch: str = typer.Option(DEFAULT_BRANCH, "--branch", help="Default branch used for raw changelog files"),
    registry: str = typer.Option(DEFAULT_REGISTRY_URL, "--registry", help="Registry used when the lockfile has no resolved URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """outdated-changelog - Summarize what changed in every outdated dependency."""

    configure_logging(verbose)

    try:
        lock = read_lockfile(lockfile or project_dir / "package-lock.json")
        requests = get_outdated_dependencies(project_dir)

        if not requests:
            console.print("All dependencies are up to date", style="green")
            raise typer.Exit(0)

        clear_output_directory(output)
        records = asyncio.run(
            collect_changelogs(
                requests,
                lock,
                timeout=timeout,
                delay=delay,
                branch=branch,
                registry_url=registry,
            )
        )
        write_report(records, output)

    except typer.Exit:
        raise
    except (LockfileError, OutdatedCommandFailed, ValueError, OSError) as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    found = sum(1 for record in records if record.provenance is not Provenance.NOT_FOUND)
    plural = "s" if len(records) > 1 else ""
    console.print()
    console.print(
        f"{len(records)} changelog{plural} available in {output} ({found} found)",
        style="green",
    )
    console.print("Ready ! 🚀", style="green")


if __name__ == "__main__":
    app()
