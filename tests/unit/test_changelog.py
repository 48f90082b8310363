"""Tests for the changelog fallback chain."""

import httpx
import pytest

from core.changelog import ChangelogResolver
from core.errors import ChangelogNotFound
from core.github import GitHubHost
from core.models import Provenance, RegistryInfo

RAW_PREFIX = "https://raw.githubusercontent.com/acme/foo/master/"
CHANGELOG_URL = f"{RAW_PREFIX}CHANGELOG.md"
RELEASE_NOTES_URL = f"{RAW_PREFIX}RELEASENOTES.md"
COMMITS_URL = "https://api.github.com/repos/acme/foo/commits"
INFO = RegistryInfo(
    repo_url="https://github.com/acme/foo",
    current_version_date="2023-01-01T00:00:00.000Z",
    target_version_date="2024-01-01T00:00:00.000Z",
)
COMMITS = [
    {"commit": {"committer": {"date": "2023-12-01T00:00:00Z"}, "message": "Second"}},
    {"commit": {"committer": {"date": "2023-06-01T00:00:00Z"}, "message": "First"}},
]


def requested_urls(client):
    return [str(request.url).split("?", 1)[0] for request in client.requests]


class TestChangelogResolver:
    """Test ordered changelog discovery."""

    @pytest.mark.asyncio
    async def test_changelog_file_short_circuits(self, make_client):
        """Should stop at the changelog file when it exists."""
        client = make_client({
            CHANGELOG_URL: httpx.Response(200, text="# 2.0.0\n- breaking"),
            RELEASE_NOTES_URL: httpx.Response(200, text="notes"),
            COMMITS_URL: httpx.Response(200, json=COMMITS),
        })

        result = await ChangelogResolver(GitHubHost(client)).resolve(INFO, RAW_PREFIX)

        assert result.provenance == Provenance.CHANGELOG_FILE
        assert result.text == "# 2.0.0\n- breaking"
        assert requested_urls(client) == [CHANGELOG_URL]

    @pytest.mark.asyncio
    async def test_release_notes_when_changelog_missing(self, make_client):
        """Should fall back to the release-notes file without querying commits."""
        client = make_client({
            RELEASE_NOTES_URL: httpx.Response(200, text="notes"),
            COMMITS_URL: httpx.Response(200, json=COMMITS),
        })

        result = await ChangelogResolver(GitHubHost(client)).resolve(INFO, RAW_PREFIX)

        assert result.provenance == Provenance.RELEASE_NOTES_FILE
        assert result.text == "notes"
        assert COMMITS_URL not in requested_urls(client)

    @pytest.mark.asyncio
    async def test_commit_history_when_no_files(self, make_client):
        """Should summarize commits when neither file exists."""
        client = make_client({COMMITS_URL: httpx.Response(200, json=COMMITS)})

        result = await ChangelogResolver(GitHubHost(client)).resolve(INFO, RAW_PREFIX)

        assert result.provenance == Provenance.COMMIT_HISTORY
        assert result.text.splitlines() == [
            "• 2023-12-01T00:00:00Z - Second",
            "• 2023-06-01T00:00:00Z - First",
        ]
        assert requested_urls(client) == [CHANGELOG_URL, RELEASE_NOTES_URL, COMMITS_URL]

    @pytest.mark.asyncio
    async def test_redirect_status_is_not_success(self, make_client):
        """Should treat a status of 300 or more as a failed step."""
        client = make_client({
            CHANGELOG_URL: httpx.Response(304),
            RELEASE_NOTES_URL: httpx.Response(200, text="notes"),
        })

        result = await ChangelogResolver(GitHubHost(client)).resolve(INFO, RAW_PREFIX)

        assert result.provenance == Provenance.RELEASE_NOTES_FILE

    @pytest.mark.asyncio
    async def test_network_error_advances_chain(self, make_client):
        """Should move on to the next step after a transport failure."""

        def refuse(request):
            raise httpx.ConnectError("connection reset", request=request)

        client = make_client({
            CHANGELOG_URL: refuse,
            RELEASE_NOTES_URL: httpx.Response(200, text="notes"),
        })

        result = await ChangelogResolver(GitHubHost(client)).resolve(INFO, RAW_PREFIX)

        assert result.text == "notes"

    @pytest.mark.asyncio
    async def test_all_steps_fail(self, make_client):
        """Should raise ChangelogNotFound when commits are unavailable too."""
        client = make_client({COMMITS_URL: httpx.Response(200, json=[])})

        with pytest.raises(ChangelogNotFound):
            await ChangelogResolver(GitHubHost(client)).resolve(INFO, RAW_PREFIX)

        assert len(client.requests) == 3

    @pytest.mark.asyncio
    async def test_each_step_attempted_once(self, make_client):
        """Should not retry a failed file fetch."""
        client = make_client({})

        with pytest.raises(ChangelogNotFound):
            await ChangelogResolver(GitHubHost(client)).resolve(INFO, RAW_PREFIX)

        assert requested_urls(client) == [CHANGELOG_URL, RELEASE_NOTES_URL, COMMITS_URL]
