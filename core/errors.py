"""Error kinds raised while building a changelog report."""


class ChangelogError(Exception):
    """Base exception for every report-building failure."""

    code = "CHANGELOG_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class RegistryLookupFailed(ChangelogError):
    """Registry metadata is missing, unsuccessful, or has no usable repository."""

    code = "REGISTRY_LOOKUP_FAILED"


class UnsupportedHost(ChangelogError):
    """Repository URL is not hosted somewhere raw content can be derived for."""

    code = "UNSUPPORTED_HOST"


class ChangelogNotFound(ChangelogError):
    """Every step of the changelog fallback chain failed."""

    code = "CHANGELOG_NOT_FOUND"


class CommitQueryFailed(ChangelogError):
    """The commit-listing API returned nothing usable."""

    code = "COMMIT_QUERY_FAILED"


class RateLimited(CommitQueryFailed):
    """The commit-listing API kept refusing requests after backing off."""

    code = "RATE_LIMITED"

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class OutdatedCommandFailed(ChangelogError):
    """The package manager's outdated listing could not be obtained."""

    code = "OUTDATED_COMMAND_FAILED"


class LockfileError(ChangelogError):
    """The lockfile is missing or cannot be parsed."""

    code = "LOCKFILE_ERROR"
