"""Per-dependency changelog pipeline."""

import asyncio
import logging

import httpx

from .changelog import ChangelogResolver
from .errors import ChangelogError
from .github import DEFAULT_BRANCH, GitHubHost, RetryConfig
from .models import ChangelogResult, DependencyRequest, Lockfile, ReportRecord
from .report import build_record, ensure_unique_filenames
from .resolve_node import DEFAULT_REGISTRY_URL, RegistryResolver

logger = logging.getLogger(__name__)


class ChangelogPipeline:
    """Resolve changelogs for outdated dependencies, one at a time."""

    def __init__(
        self,
        registry: RegistryResolver,
        host: GitHubHost,
        delay: float = 1.0,
    ):
        """Initialize the pipeline.

        Args:
            registry: Registry metadata resolver
            host: Source host used for raw files and commit history
            delay: Seconds to wait between dependencies
        """
        self.registry = registry
        self.host = host
        self.changelogs = ChangelogResolver(host)
        self.delay = delay

    async def check_dependency(self, sequence_id: int, request: DependencyRequest) -> ReportRecord:
        """Build the record for one dependency, never raising for resolution failures.

        Args:
            sequence_id: 1-based position in the outdated listing
            request: The outdated dependency

        Returns:
            A record with the changelog, or the placeholder text on failure
        """
        repo_url = None
        try:
            registry_info = await self.registry.resolve(request)
            repo_url = registry_info.repo_url
            raw_prefix = self.host.raw_prefix(repo_url)
            changelog = await self.changelogs.resolve(registry_info, raw_prefix)
            logger.info("✔ %s done (%s)", request.name, changelog.provenance.value)
        except ChangelogError as e:
            logger.error("fail for %s with %s", request.name, e)
            changelog = ChangelogResult.not_found()
        except Exception:
            logger.exception("unexpected failure for %s", request.name)
            changelog = ChangelogResult.not_found()

        return build_record(sequence_id, request, changelog, repo_url)

    async def run(self, requests: list[DependencyRequest]) -> list[ReportRecord]:
        """Process every dependency sequentially in enumeration order.

        Args:
            requests: Outdated dependencies

        Returns:
            Records in the same order, with unique output filenames
        """
        records: list[ReportRecord] = []
        total = len(requests)

        for sequence_id, request in enumerate(requests, start=1):
            logger.info("%s (%d/%d)", request.name, sequence_id, total)
            records.append(await self.check_dependency(sequence_id, request))

            if sequence_id < total and self.delay > 0:
                await asyncio.sleep(self.delay)

        return ensure_unique_filenames(records)


async def collect_changelogs(
    requests: list[DependencyRequest],
    lockfile: Lockfile,
    timeout: float = 30.0,
    delay: float = 1.0,
    branch: str = DEFAULT_BRANCH,
    registry_url: str = DEFAULT_REGISTRY_URL,
    retry_config: RetryConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ReportRecord]:
    """Resolve changelogs for all requests over a single HTTP client.

    Args:
        requests: Outdated dependencies in enumeration order
        lockfile: Parsed lockfile
        timeout: Per-request timeout in seconds
        delay: Seconds to wait between dependencies
        branch: Default branch used for raw-content URLs
        registry_url: Registry used when the lockfile has no resolved URL
        retry_config: Backoff settings for rate-limited API calls
        transport: Optional httpx transport (used by tests)

    Returns:
        One record per request
    """
    async with httpx.AsyncClient(
        timeout=timeout, follow_redirects=True, transport=transport
    ) as client:
        pipeline = ChangelogPipeline(
            registry=RegistryResolver(client, lockfile, registry_url=registry_url),
            host=GitHubHost(client, branch=branch, retry_config=retry_config),
            delay=delay,
        )
        return await pipeline.run(requests)
