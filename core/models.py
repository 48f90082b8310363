"""Core data models for outdated-changelog."""

from dataclasses import dataclass
from enum import Enum

NOT_FOUND_TEXT = "Changelog not found"


@dataclass(frozen=True)
class DependencyRequest:
    """A single outdated dependency as reported by the package manager."""

    name: str
    current_version: str
    target_version: str
    homepage_url: str | None = None


@dataclass
class Lockfile:
    """Resolved tarball URLs recorded in a package-lock file."""

    resolved: dict[str, str]

    def resolved_url(self, name: str) -> str | None:
        return self.resolved.get(name)


@dataclass
class RegistryInfo:
    """Repository location and publish dates taken from registry metadata."""

    repo_url: str
    current_version_date: str | None = None
    target_version_date: str | None = None


class Provenance(str, Enum):
    """Which fallback step supplied a changelog."""

    CHANGELOG_FILE = "changelog file"
    RELEASE_NOTES_FILE = "release-notes file"
    COMMIT_HISTORY = "commit history"
    NOT_FOUND = "not found"


@dataclass
class ChangelogResult:
    """Human-readable change text plus where it came from."""

    text: str
    provenance: Provenance

    @classmethod
    def not_found(cls) -> "ChangelogResult":
        return cls(text=NOT_FOUND_TEXT, provenance=Provenance.NOT_FOUND)


class UpgradeClassification(str, Enum):
    """Severity bucket of a version change."""

    MAJOR = "major"
    MINOR = "minor"
    FIX = "fix"
    LATEST = "latest"
    UNKNOWN = "unknown"


@dataclass
class ReportRecord:
    """Everything the report writer needs for one dependency page."""

    sequence_id: int
    dependency_name: str
    source_url: str | None
    output_filename: str
    rendered_html: str
    current_version: str
    target_version: str
    classification: UpgradeClassification
    provenance: Provenance = Provenance.NOT_FOUND
