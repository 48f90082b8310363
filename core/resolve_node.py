"""npm registry metadata resolution."""

import logging
import re

import httpx

from .errors import RegistryLookupFailed
from .models import DependencyRequest, Lockfile, RegistryInfo

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
TARBALL_MARKER = "/-/"

GITHUB_URL_PATTERN = re.compile(
    r"github\.com[/:](?P<slug>[^/\s:]+/[^/#?\s]+?)(?:\.git)?(?:[/#?].*)?$"
)
SHORTHAND_PATTERN = re.compile(r"^(?:github:)?(?P<slug>[\w.-]+/[\w.-]+)$")


def normalize_repository_url(repository: dict | str | None) -> str | None:
    """Turn a registry ``repository`` field into a GitHub web URL.

    Args:
        repository: Object with a ``url`` key or an npm shorthand string

    Returns:
        ``https://github.com/<owner>/<repo>`` or None if not a GitHub repository
    """
    if isinstance(repository, dict):
        repository = repository.get("url")
    if not isinstance(repository, str) or not repository.strip():
        return None

    value = repository.strip()
    match = GITHUB_URL_PATTERN.search(value)
    if not match:
        match = SHORTHAND_PATTERN.match(value)
    if not match:
        return None

    return f"https://github.com/{match.group('slug')}"


class RegistryResolver:
    """Resolver for npm registry metadata."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        lockfile: Lockfile,
        registry_url: str = DEFAULT_REGISTRY_URL,
    ):
        """Initialize registry resolver.

        Args:
            client: Shared HTTP client
            lockfile: Parsed lockfile used to locate metadata URLs
            registry_url: Registry used when the lockfile has no resolved URL
        """
        self.client = client
        self.lockfile = lockfile
        self.registry_url = registry_url.rstrip("/")

    def get_registry_url(self, name: str) -> str:
        """Metadata URL for a dependency, derived from its resolved tarball URL."""
        resolved = self.lockfile.resolved_url(name) or ""
        marker = resolved.find(TARBALL_MARKER)
        if marker != -1:
            return resolved[:marker]

        return f"{self.registry_url}/{name.replace('/', '%2f')}"

    async def resolve(self, request: DependencyRequest) -> RegistryInfo:
        """Resolve repository URL and publish dates for a dependency.

        Args:
            request: The outdated dependency

        Returns:
            Registry information for the dependency

        Raises:
            RegistryLookupFailed: If metadata is unavailable or has no GitHub repository
        """
        logger.info("get infos for %s", request.name)

        metadata = await self._fetch_package_metadata(self.get_registry_url(request.name))
        not_found = f"Repository not found for {request.homepage_url or request.name}"
        if not metadata:
            raise RegistryLookupFailed(not_found)

        repo_url = normalize_repository_url(metadata.get("repository"))
        if not repo_url:
            raise RegistryLookupFailed(not_found)

        times = metadata.get("time")
        if not isinstance(times, dict):
            times = {}

        return RegistryInfo(
            repo_url=repo_url,
            current_version_date=times.get(request.current_version),
            target_version_date=times.get(request.target_version),
        )

    async def _fetch_package_metadata(self, url: str) -> dict | None:
        """Fetch package metadata from the registry.

        Args:
            url: Metadata URL

        Returns:
            Package metadata dict or None on any unsuccessful response
        """
        try:
            response = await self.client.get(url, headers={"Accept": "application/json"})
        except httpx.RequestError as e:
            logger.debug("registry request to %s failed: %s", url, e)
            return None

        if response.status_code >= 300:
            logger.debug("registry returned %s for %s", response.status_code, url)
            return None

        try:
            metadata = response.json()
        except ValueError:
            return None

        return metadata if isinstance(metadata, dict) else None
