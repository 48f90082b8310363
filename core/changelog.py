"""Changelog discovery with an ordered fallback chain."""

import logging
from collections.abc import Awaitable, Callable

from .errors import ChangelogNotFound, CommitQueryFailed
from .github import GitHubHost
from .models import ChangelogResult, Provenance, RegistryInfo

logger = logging.getLogger(__name__)

CHANGELOG_FILES = (
    ("CHANGELOG.md", Provenance.CHANGELOG_FILE),
    ("RELEASENOTES.md", Provenance.RELEASE_NOTES_FILE),
)

Step = Callable[[], Awaitable[str | None]]


class ChangelogResolver:
    """Find change text for a repository.

    Steps run strictly in order and the first one that yields text wins:
    the changelog file, the release-notes file, then a summary of commits
    published between the two versions.
    """

    def __init__(self, host: GitHubHost):
        self.host = host

    def _file_step(self, url: str) -> Step:
        async def step() -> str | None:
            logger.info("get changelog at %s", url)
            return await self.host.fetch_raw_file(url)

        return step

    def _commit_step(self, info: RegistryInfo) -> Step:
        async def step() -> str | None:
            try:
                return await self.host.get_commits(info)
            except CommitQueryFailed as e:
                logger.info("%s", e)
                return None

        return step

    def steps(self, info: RegistryInfo, raw_prefix: str) -> list[tuple[Provenance, Step]]:
        steps = [
            (provenance, self._file_step(f"{raw_prefix}{filename}"))
            for filename, provenance in CHANGELOG_FILES
        ]
        steps.append((Provenance.COMMIT_HISTORY, self._commit_step(info)))
        return steps

    async def resolve(self, info: RegistryInfo, raw_prefix: str) -> ChangelogResult:
        """Run the fallback chain.

        Args:
            info: Registry information for the dependency
            raw_prefix: Raw-content prefix of its repository

        Returns:
            The first changelog text found, with its provenance

        Raises:
            ChangelogNotFound: If no step produced any text
        """
        for provenance, step in self.steps(info, raw_prefix):
            text = await step()
            if text is not None:
                return ChangelogResult(text=text, provenance=provenance)

        raise ChangelogNotFound(f"Changelog not found for {info.repo_url}")
