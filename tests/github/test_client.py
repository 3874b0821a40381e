"""Tests for GitHubClient.

Tests cover:
- Credential resolution (before any I/O)
- Request construction (bearer auth, paging parameters)
- Success wrapping and Link header parsing
- Failure classification (non-success, transport, malformed body)
- Rate limit retries: retry-after waits, ceiling, recovery
- Rate limit header tracking
"""

from unittest.mock import MagicMock, call

import pytest
from githubkit.exception import RequestError

from github_pr_count.config import ClientConfig
from github_pr_count.github.client import GitHubClient, parse_retry_after
from github_pr_count.github.exceptions import (
    MissingCredentialError,
    RateLimitExceededError,
    UpstreamError,
)
from github_pr_count.github.rate_limit import RateLimitMonitor, RateLimitPool
from github_pr_count.schemas import ApiResult, PageLinks, RepositoryRef
from tests.fixtures.github_responses import (
    make_failed,
    make_link_header,
    make_rate_limited,
    make_response,
)
from tests.fixtures.rate_limit_responses import make_rate_limit_headers

PULLS = "/repos/octocat/hello-world/pulls"


def make_client(retry_limit: int = 5, **kwargs) -> GitHubClient:
    """Client with a given retry ceiling."""
    return GitHubClient(config=ClientConfig(retry_limit=retry_limit), **kwargs)


# -----------------------------------------------------------------------------
# Test: parse_retry_after
# -----------------------------------------------------------------------------
class TestParseRetryAfter:
    """Tests for reading the retry-after header."""

    def test_seconds(self):
        assert parse_retry_after({"retry-after": "60"}) == 60

    def test_zero(self):
        assert parse_retry_after({"retry-after": "0"}) == 0

    def test_whitespace(self):
        assert parse_retry_after({"retry-after": " 5 "}) == 5

    def test_missing(self):
        assert parse_retry_after({}) is None

    @pytest.mark.parametrize("value", ["soon", "-1", "1.5", "Wed, 21 Oct 2015 07:28:00 GMT"])
    def test_invalid(self, value):
        assert parse_retry_after({"retry-after": value}) is None


# -----------------------------------------------------------------------------
# Test: Initialization
# -----------------------------------------------------------------------------
class TestGitHubClientInit:
    """Tests for GitHubClient initialization."""

    def test_defaults_from_settings(self):
        client = GitHubClient()
        assert client.retry_limit == 5
        assert client.results_per_page == 100
        assert client.rate_monitor is None

    def test_init_without_token_does_not_raise(self, no_token):
        """A missing token is only reported when a call is issued."""
        client = GitHubClient()
        assert client.retry_limit == 5

    def test_init_with_rate_monitor(self):
        monitor = RateLimitMonitor()
        client = GitHubClient(rate_monitor=monitor)
        assert client.rate_monitor is monitor

    def test_retry_limit_from_env(self, monkeypatch):
        from github_pr_count.config import get_settings

        monkeypatch.setenv("CLIENT__RETRY_LIMIT", "2")
        get_settings.cache_clear()

        assert GitHubClient().retry_limit == 2

    def test_paths(self):
        repo = RepositoryRef(owner="octocat", repo="hello-world")
        assert GitHubClient.pulls_path(repo) == PULLS
        assert GitHubClient.search_path("issues") == "/search/issues"

    async def test_context_manager(self, mock_github):
        async with GitHubClient() as client:
            assert isinstance(client, GitHubClient)


# -----------------------------------------------------------------------------
# Test: Credentials
# -----------------------------------------------------------------------------
class TestCredentials:
    """Tests for token resolution."""

    async def test_missing_token_raises_before_io(self, mock_github, no_token):
        client = make_client()

        with pytest.raises(MissingCredentialError):
            await client.execute(PULLS)

        mock_github.arequest.assert_not_called()

    async def test_missing_token_is_not_retried(self, mock_github, no_token, no_sleep):
        client = make_client()

        with pytest.raises(MissingCredentialError):
            await client.get_page(PULLS, 1)

        no_sleep.assert_not_called()

    async def test_api_key_alias(self, mock_github, no_token, monkeypatch):
        """GITHUB_API_KEY is accepted in place of GITHUB_TOKEN."""
        from github_pr_count.config import get_settings

        monkeypatch.setenv("GITHUB_API_KEY", "api-key-token")
        get_settings.cache_clear()
        mock_github.arequest.return_value = make_response(body=[])

        await make_client().execute(PULLS)

        headers = mock_github.arequest.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer api-key-token"

    async def test_token_set_after_settings_cached(self, mock_github, no_token, monkeypatch):
        """A token exported after startup is used by the next call."""
        from github_pr_count.config import get_settings

        client = make_client()
        assert get_settings().github_token == ""
        with pytest.raises(MissingCredentialError):
            await client.execute(PULLS)

        monkeypatch.setenv("GITHUB_TOKEN", "late-token")
        mock_github.arequest.return_value = make_response(body=[])

        await client.execute(PULLS)

        headers = mock_github.arequest.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer late-token"

    async def test_explicit_token_wins(self, mock_github):
        mock_github.arequest.return_value = make_response(body=[])

        await make_client(token="explicit").execute(PULLS)

        headers = mock_github.arequest.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer explicit"


# -----------------------------------------------------------------------------
# Test: Request Construction
# -----------------------------------------------------------------------------
class TestRequestConstruction:
    """Tests for how calls are issued."""

    async def test_bearer_and_accept_headers(self, mock_github):
        mock_github.arequest.return_value = make_response(body=[])

        await make_client().execute(PULLS, {"state": "all"})

        args, kwargs = mock_github.arequest.call_args
        assert args == ("GET", PULLS)
        assert kwargs["params"] == {"state": "all"}
        assert kwargs["headers"]["Authorization"] == "Bearer test-token"
        assert kwargs["headers"]["Accept"] == "application/vnd.github+json"

    async def test_get_page_sets_paging_parameters(self, mock_github):
        mock_github.arequest.return_value = make_response(body=[])
        shared = {"state": "all"}

        result = await make_client().get_page(PULLS, 3, shared, per_page=15)

        params = mock_github.arequest.call_args.kwargs["params"]
        assert params == {"state": "all", "page": 3, "per_page": 15}
        assert shared == {"state": "all"}
        assert result.page == 3

    async def test_get_page_default_page_size(self, mock_github):
        mock_github.arequest.return_value = make_response(body=[])

        await make_client().get_page(PULLS, 1)

        assert mock_github.arequest.call_args.kwargs["params"]["per_page"] == 100


# -----------------------------------------------------------------------------
# Test: Success Responses
# -----------------------------------------------------------------------------
class TestSuccessResponses:
    """Tests for wrapping successful responses."""

    async def test_result_fields(self, mock_github):
        link = make_link_header(PULLS, {"next": 2, "last": 3})
        mock_github.arequest.return_value = make_response(
            body=[{"number": 1}, {"number": 2}],
            headers={"Link": link, "ETag": "abc"},
        )

        result = await make_client().get_page(PULLS, 1)

        assert isinstance(result, ApiResult)
        assert result.status_code == 200
        assert result.item_count == 2
        assert result.links.next == 2
        assert result.links.last == 3
        # Header names are normalised to lower case
        assert result.headers["etag"] == "abc"

    async def test_no_link_header(self, mock_github):
        mock_github.arequest.return_value = make_response(body=[{"number": 1}])

        result = await make_client().execute(PULLS)

        assert result.links == PageLinks()
        assert result.page is None

    async def test_object_body(self, mock_github):
        mock_github.arequest.return_value = make_response(body={"total_count": 20})

        result = await make_client().execute("/search/issues", {"q": "repo:a/b is:pr"})

        assert result.body == {"total_count": 20}
        assert result.item_count == 0


# -----------------------------------------------------------------------------
# Test: Failure Responses
# -----------------------------------------------------------------------------
class TestFailureResponses:
    """Tests for non-retryable failures."""

    @pytest.mark.parametrize("status_code", [400, 401, 404, 422, 500, 502])
    async def test_non_success_raises_upstream_error(self, mock_github, no_sleep, status_code):
        mock_github.arequest.side_effect = make_failed(status_code)

        with pytest.raises(UpstreamError) as exc_info:
            await make_client().execute(PULLS)

        assert exc_info.value.status_code == status_code
        assert mock_github.arequest.call_count == 1
        no_sleep.assert_not_called()

    async def test_unexpected_non_2xx_without_exception(self, mock_github):
        """A 3xx handed back as a response is still a failure."""
        mock_github.arequest.return_value = make_response(status_code=304)

        with pytest.raises(UpstreamError) as exc_info:
            await make_client().execute(PULLS)

        assert exc_info.value.status_code == 304

    async def test_transport_error(self, mock_github):
        mock_github.arequest.side_effect = RequestError("connection reset")

        with pytest.raises(UpstreamError, match="connection reset"):
            await make_client().execute(PULLS)

    async def test_malformed_body(self, mock_github):
        response = make_response()
        response.json.side_effect = ValueError("Expecting value")
        mock_github.arequest.return_value = response

        with pytest.raises(UpstreamError, match="invalid JSON"):
            await make_client().execute(PULLS)


# -----------------------------------------------------------------------------
# Test: Rate Limit Retries
# -----------------------------------------------------------------------------
class TestRateLimitRetries:
    """Tests for the retry-after driven retry policy."""

    @pytest.mark.parametrize("status_code", [403, 429])
    async def test_recovers_after_rate_limit(self, mock_github, no_sleep, status_code):
        mock_github.arequest.side_effect = [
            make_rate_limited(status_code, retry_after="7"),
            make_response(body=[{"number": 1}]),
        ]

        result = await make_client().execute(PULLS)

        assert result.item_count == 1
        assert mock_github.arequest.call_count == 2
        no_sleep.assert_awaited_once_with(7)

    async def test_recovers_within_ceiling(self, mock_github, no_sleep):
        """Five rate-limited responses then success: retry_limit 5 is enough."""
        mock_github.arequest.side_effect = [make_rate_limited(retry_after="1")] * 5 + [
            make_response(body=[{"number": 1}, {"number": 2}])
        ]

        result = await make_client(retry_limit=5).execute(PULLS)

        assert result.item_count == 2
        assert mock_github.arequest.call_count == 6
        assert no_sleep.await_count == 5

    async def test_exhausts_after_retry_limit_plus_one_attempts(self, mock_github, no_sleep):
        mock_github.arequest.side_effect = [make_rate_limited(retry_after="1")] * 6

        with pytest.raises(RateLimitExceededError) as exc_info:
            await make_client(retry_limit=5).execute(PULLS)

        assert mock_github.arequest.call_count == 6
        assert exc_info.value.attempts == 6
        assert exc_info.value.retry_after == 1
        # No wait after the final attempt
        assert no_sleep.await_count == 5

    async def test_zero_retry_limit(self, mock_github, no_sleep):
        mock_github.arequest.side_effect = [make_rate_limited(retry_after="1")]

        with pytest.raises(RateLimitExceededError):
            await make_client(retry_limit=0).execute(PULLS)

        assert mock_github.arequest.call_count == 1
        no_sleep.assert_not_called()

    @pytest.mark.parametrize("retry_after", [None, "soon", "-5"])
    async def test_rate_limit_without_valid_retry_after(
        self, mock_github, no_sleep, retry_after
    ):
        mock_github.arequest.side_effect = [make_rate_limited(retry_after=retry_after)]

        with pytest.raises(UpstreamError) as exc_info:
            await make_client().execute(PULLS)

        assert exc_info.value.status_code == 403
        assert mock_github.arequest.call_count == 1
        no_sleep.assert_not_called()

    async def test_wait_floor_from_min_interval(self, mock_github, no_sleep):
        mock_github.arequest.side_effect = [
            make_rate_limited(retry_after="0"),
            make_rate_limited(retry_after="3"),
            make_response(body=[]),
        ]

        await make_client(min_request_interval=1.5).execute(PULLS)

        assert no_sleep.await_args_list == [call(1.5), call(3)]

    async def test_each_attempt_resends_same_request(self, mock_github, no_sleep):
        mock_github.arequest.side_effect = [
            make_rate_limited(retry_after="0"),
            make_response(body=[]),
        ]

        await make_client().get_page(PULLS, 4, {"state": "all"})

        first, second = mock_github.arequest.call_args_list
        assert first == second
        assert second.kwargs["params"]["page"] == 4


# -----------------------------------------------------------------------------
# Test: Rate Limit Tracking
# -----------------------------------------------------------------------------
class TestRateLimitTracking:
    """Tests for feeding response headers to the monitor."""

    async def test_monitor_updated_from_success(self, mock_github):
        monitor = RateLimitMonitor()
        mock_github.arequest.return_value = make_response(
            body=[], headers=make_rate_limit_headers(remaining=4000)
        )

        await make_client(rate_monitor=monitor).execute(PULLS)

        core = monitor.get_pool_limit(RateLimitPool.CORE)
        assert core is not None
        assert core.remaining == 4000

    async def test_monitor_updated_from_rate_limited(self, mock_github, no_sleep):
        monitor = RateLimitMonitor()
        mock_github.arequest.side_effect = [make_rate_limited(retry_after="0")] * 2

        with pytest.raises(RateLimitExceededError):
            await make_client(retry_limit=1, rate_monitor=monitor).execute(PULLS)

        assert monitor.get_pool_limit(RateLimitPool.CORE).remaining == 0

    async def test_monitor_failure_does_not_break_call(self, mock_github):
        monitor = MagicMock()
        monitor.update_from_headers.side_effect = RuntimeError("boom")
        mock_github.arequest.return_value = make_response(body=[{"number": 1}])

        result = await make_client(rate_monitor=monitor).execute(PULLS)

        assert result.item_count == 1
