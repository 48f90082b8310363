"""Node.js package-lock.json and `npm outdated` output parsing."""

import json

from .errors import LockfileError, OutdatedCommandFailed
from .models import DependencyRequest, Lockfile

NODE_MODULES_PREFIX = "node_modules/"


class LockfileParser:
    """Parser for npm package-lock.json files (lockfile versions 1 to 3)."""

    def _from_dependencies(self, dependencies: dict) -> dict[str, str]:
        """Read the v1 ``dependencies`` tree, top level only."""
        resolved: dict[str, str] = {}
        for name, entry in dependencies.items():
            if isinstance(entry, dict) and entry.get("resolved"):
                resolved[name] = entry["resolved"]
        return resolved

    def _from_packages(self, packages: dict) -> dict[str, str]:
        """Read the v2/v3 ``packages`` map, skipping nested node_modules."""
        resolved: dict[str, str] = {}
        for key, entry in packages.items():
            if not key.startswith(NODE_MODULES_PREFIX):
                continue
            name = key[len(NODE_MODULES_PREFIX):]
            if NODE_MODULES_PREFIX in name:
                continue
            if isinstance(entry, dict) and entry.get("resolved"):
                resolved[name] = entry["resolved"]
        return resolved

    def parse(self, content: str) -> Lockfile:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise LockfileError(f"Invalid lockfile JSON: {e}") from e

        if not isinstance(data, dict):
            raise LockfileError("Lockfile root must be an object")

        resolved = self._from_packages(data.get("packages") or {})
        # v2 lockfiles carry both sections; the packages map wins
        for name, url in self._from_dependencies(data.get("dependencies") or {}).items():
            resolved.setdefault(name, url)

        return Lockfile(resolved=resolved)


def parse_lockfile(content: str) -> Lockfile:
    """Parse package-lock.json content into a Lockfile.

    Args:
        content: The package-lock.json file content

    Returns:
        Lockfile mapping dependency names to resolved tarball URLs
    """
    parser = LockfileParser()
    return parser.parse(content)


def parse_outdated(content: str) -> list[DependencyRequest]:
    """Parse ``npm outdated --json --long`` output into dependency requests.

    Args:
        content: The JSON printed by npm (may be empty)

    Returns:
        Dependency requests in the order npm listed them
    """
    try:
        data = json.loads(content or "{}")
    except json.JSONDecodeError as e:
        raise OutdatedCommandFailed(f"Invalid outdated output: {e}") from e

    if not isinstance(data, dict):
        raise OutdatedCommandFailed("Outdated output must be an object")

    requests: list[DependencyRequest] = []
    for name, entry in data.items():
        # Workspaces report one entry per location
        if isinstance(entry, list):
            entry = entry[0] if entry else {}
        if not isinstance(entry, dict):
            continue

        requests.append(
            DependencyRequest(
                name=name,
                current_version=entry.get("current") or entry.get("wanted") or "",
                target_version=entry.get("latest") or "",
                homepage_url=entry.get("homepage"),
            )
        )

    return requests
