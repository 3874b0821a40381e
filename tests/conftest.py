"""Pytest configuration and shared fixtures.

Usage Guide:
- For executor/counter tests: use the fake_api fixture, which replaces the
  githubkit client with an in-memory pull request listing
- For response-level tests: import factories from tests.fixtures.github_responses
- For rate limit header tests: import from tests.fixtures.rate_limit_responses
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from github_pr_count.config import get_settings
from github_pr_count.github.counting import InMemoryCountCache, get_default_cache
from github_pr_count.logging import reset_logging
from github_pr_count.schemas import RepositoryRef
from tests.fixtures.github_responses import FakePullRequestApi

TEST_TOKEN = "test-token"
TEST_OWNER = "octocat"
TEST_REPO = "hello-world"


# -----------------------------------------------------------------------------
# Environment Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Give every test a known token, fresh settings and an empty default cache."""
    monkeypatch.setenv("GITHUB_TOKEN", TEST_TOKEN)
    monkeypatch.delenv("GITHUB_API_KEY", raising=False)
    get_settings.cache_clear()
    get_default_cache().clear()
    yield
    get_settings.cache_clear()
    get_default_cache().clear()
    reset_logging()


@pytest.fixture
def no_token(monkeypatch):
    """Remove every GitHub token source."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_API_KEY", raising=False)
    get_settings.cache_clear()


# -----------------------------------------------------------------------------
# GitHub Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_github():
    """Create a mock githubkit GitHub client."""
    with patch("github_pr_count.github.client.GitHub") as mock_class:
        mock_instance = MagicMock()
        mock_instance.arequest = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def fake_api(mock_github):
    """Route every githubkit request to an in-memory pull request listing.

    Set ``fake_api.total`` to the number of pull requests the repository has.
    """
    api = FakePullRequestApi(owner=TEST_OWNER, repo=TEST_REPO)
    mock_github.arequest.side_effect = api.request
    return api


@pytest.fixture
def no_sleep():
    """Make asyncio.sleep return immediately, recording requested delays."""
    with patch("github_pr_count.github.client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


# -----------------------------------------------------------------------------
# Domain Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def repo_ref() -> RepositoryRef:
    """The repository served by fake_api."""
    return RepositoryRef(owner=TEST_OWNER, repo=TEST_REPO)


@pytest.fixture
def count_cache() -> InMemoryCountCache:
    """A fresh count cache, independent of the process-wide one."""
    return InMemoryCountCache()
