"""GitHub raw-content and commit-listing access."""

import asyncio
import logging
import re
import time
from dataclasses import dataclass

import httpx

from .errors import CommitQueryFailed, RateLimited, UnsupportedHost
from .models import RegistryInfo

logger = logging.getLogger(__name__)

GITHUB_WEB_URL = "https://github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"
GITHUB_API_URL = "https://api.github.com"
DEFAULT_BRANCH = "master"
USER_AGENT = "outdated-changelog/0.1.0"

GITHUB_URL_PATTERN = re.compile(r"^https://github\.com/")
REPO_SLUG_PATTERN = re.compile(r"github\.com/([^#?]+)")


@dataclass
class RetryConfig:
    """Backoff behaviour for rate-limited API calls."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    max_backoff: float = 60.0


def is_github_url(url: str) -> bool:
    return bool(GITHUB_URL_PATTERN.match(url or ""))


def is_rate_limited(response: httpx.Response) -> bool:
    """Check whether an API response means the anonymous quota ran out."""
    if response.status_code == 429:
        return True
    if response.status_code != 403:
        return False
    if response.headers.get("X-RateLimit-Remaining") == "0":
        return True
    return "rate limit" in response.text.lower()


def format_commit(entry: dict) -> str:
    """Render one commit-listing entry as a single bullet line."""
    commit = entry.get("commit") or {}
    committer = commit.get("committer") or {}
    message = (commit.get("message") or "").replace("\\n", " | ")
    first_line = message.splitlines()[0] if message else ""
    return f"• {committer.get('date', '')} - {first_line}"


class GitHubHost:
    """Raw-content locator and commit-history source for GitHub repositories."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        branch: str = DEFAULT_BRANCH,
        api_url: str = GITHUB_API_URL,
        retry_config: RetryConfig | None = None,
    ):
        self.client = client
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.retry_config = retry_config or RetryConfig()

    def raw_prefix(self, repo_url: str) -> str:
        """Derive the URL prefix serving raw files of the repository.

        Args:
            repo_url: GitHub web URL of the repository

        Returns:
            Prefix ending in ``/<branch>/``; append a file path to fetch it

        Raises:
            UnsupportedHost: If the URL is not a GitHub web URL
        """
        if not is_github_url(repo_url):
            raise UnsupportedHost(f"not a github repo: {repo_url}")

        raw_url = repo_url.split("#", 1)[0].rstrip("/")
        raw_url = raw_url.replace(GITHUB_WEB_URL, GITHUB_RAW_URL, 1)
        return f"{raw_url}/{self.branch}/"

    async def fetch_raw_file(self, url: str) -> str | None:
        """Fetch a raw file, returning None on any unsuccessful response."""
        try:
            response = await self.client.get(url)
        except httpx.RequestError as e:
            logger.debug("raw fetch %s failed: %s", url, e)
            return None

        if response.status_code >= 300:
            return None
        return response.text

    async def get_commits(self, info: RegistryInfo) -> str:
        """Summarize commits between the two publish dates.

        Args:
            info: Registry information with repository URL and publish dates

        Returns:
            One bullet line per commit, in API order

        Raises:
            CommitQueryFailed: If the query fails or returns no commits
            RateLimited: If the API stays rate limited after backing off
        """
        match = REPO_SLUG_PATTERN.search(info.repo_url)
        if not match:
            raise CommitQueryFailed(f"Commit not found for {info.repo_url}")
        repo_name = match.group(1).strip("/")
        logger.info("get commits for %s", repo_name)

        params = {}
        if info.current_version_date:
            params["since"] = info.current_version_date
        if info.target_version_date:
            params["until"] = info.target_version_date

        url = f"{self.api_url}/repos/{repo_name}/commits"
        response = await self._get_with_backoff(url, params)
        if response.status_code >= 300:
            raise CommitQueryFailed(f"Commit not found for {repo_name}")

        try:
            commits = response.json()
        except ValueError as e:
            raise CommitQueryFailed(f"Invalid commit listing for {repo_name}") from e

        if not isinstance(commits, list) or not commits:
            raise CommitQueryFailed(f"Commit not found for {repo_name}")

        lines = [format_commit(entry) for entry in commits if isinstance(entry, dict)]
        if not lines:
            raise CommitQueryFailed(f"Commit not found for {repo_name}")

        return "\n".join(lines)

    async def _get_with_backoff(self, url: str, params: dict) -> httpx.Response:
        """GET an API URL, backing off exponentially while rate limited."""
        headers = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await self.client.get(url, params=params, headers=headers)
            except httpx.RequestError as e:
                raise CommitQueryFailed(f"Commit query to {url} failed: {e}") from e

            if not is_rate_limited(response):
                return response

            wait_time = self._get_backoff_time(attempt, response)
            if attempt >= self.retry_config.max_retries:
                raise RateLimited(f"Rate limited by {self.api_url}", retry_after=wait_time)

            logger.warning("rate limited by %s, retrying in %.1fs", self.api_url, wait_time)
            await asyncio.sleep(wait_time)

        raise RateLimited(f"Rate limited by {self.api_url}")

    def _get_backoff_time(self, attempt: int, response: httpx.Response) -> float:
        """Seconds to wait before the next attempt.

        Retry-After and X-RateLimit-Reset take precedence over the
        exponential schedule; every value is capped by ``max_backoff``.
        """
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return min(float(retry_after), self.retry_config.max_backoff)
            except ValueError:
                pass

        reset = response.headers.get("X-RateLimit-Reset")
        if reset:
            try:
                return min(max(0.0, float(reset) - time.time()), self.retry_config.max_backoff)
            except ValueError:
                pass

        return min(self.retry_config.backoff_factor ** attempt, self.retry_config.max_backoff)
