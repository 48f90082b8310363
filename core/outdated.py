"""Invocation of the package manager's outdated listing."""

import logging
import subprocess
from pathlib import Path

from .errors import OutdatedCommandFailed
from .models import DependencyRequest
from .parse_node import parse_outdated

logger = logging.getLogger(__name__)

OUTDATED_COMMAND = ("npm", "outdated", "--json", "--long")


def get_outdated_dependencies(
    project_dir: Path | str = ".",
    command: tuple[str, ...] = OUTDATED_COMMAND,
) -> list[DependencyRequest]:
    """Run the outdated command and return the dependencies it lists.

    npm exits non-zero whenever something is outdated, so a failing exit
    status is only fatal when nothing was printed.

    Args:
        project_dir: Directory holding package.json
        command: Command line to execute

    Returns:
        Outdated dependencies in enumeration order

    Raises:
        OutdatedCommandFailed: If the command cannot run or prints nothing on error
    """
    logger.info("get outdated dependencies")

    try:
        completed = subprocess.run(
            list(command),
            cwd=str(project_dir),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise OutdatedCommandFailed(f"Cannot run {' '.join(command)}: {e}") from e

    stdout = completed.stdout or ""
    if completed.returncode != 0 and not stdout.strip():
        stderr = (completed.stderr or "").strip()
        raise OutdatedCommandFailed(
            f"{' '.join(command)} exited with {completed.returncode}: {stderr or 'no output'}"
        )

    return parse_outdated(stdout)
