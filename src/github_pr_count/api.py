"""HTTP API for pull request counts.

Routes:
- GET /github/pull-requests/count             metadata strategy
- GET /github/pull-requests/count/concurrent  concurrent scan strategy
- GET /github/pull-requests/count/search      search strategy
- GET /health

Every count route takes ``owner`` and ``repo`` query parameters and
answers ``{"count": n}``. Counting errors are mapped to HTTP statuses by
the exception handlers registered in create_app().
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from github_pr_count import __version__
from github_pr_count.github import (
    CountStrategy,
    CountTimeoutError,
    CountUnavailableError,
    GitHubClient,
    GitHubClientError,
    MissingCredentialError,
    PullRequestCounter,
    RateLimitExceededError,
    RateLimitMonitor,
    UpstreamError,
)
from github_pr_count.logging import get_logger
from github_pr_count.schemas import NAME_MAX_LENGTH, CountResult, RepositoryRef

logger = get_logger(__name__)

ERROR_STATUS: dict[type[GitHubClientError], int] = {
    MissingCredentialError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    RateLimitExceededError: status.HTTP_503_SERVICE_UNAVAILABLE,
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
    CountUnavailableError: status.HTTP_502_BAD_GATEWAY,
    CountTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
}

# Owner and repository names never contain slashes or whitespace
NAME_PATTERN = r"^[^/\s]+$"

OwnerQuery = Annotated[
    str,
    Query(
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        pattern=NAME_PATTERN,
        description="Repository owner",
    ),
]
RepoQuery = Annotated[
    str,
    Query(
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        pattern=NAME_PATTERN,
        description="Repository name",
    ),
]


def get_counter(request: Request) -> PullRequestCounter:
    """Dependency returning the app's counter."""
    counter: PullRequestCounter = request.app.state.counter
    return counter


CounterDep = Annotated[PullRequestCounter, Depends(get_counter)]


async def _handle_count_error(request: Request, exc: Exception) -> JSONResponse:
    """Translate a counting error into its HTTP status."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_502_BAD_GATEWAY,
    )
    logger.warning(
        "{} {} failed with {}: {}",
        request.method,
        request.url.path,
        status_code,
        exc,
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(counter: PullRequestCounter | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        counter: Counter serving every route. If not provided, one is
                 created at startup over a new GitHubClient and closed
                 at shutdown.

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if counter is not None:
            yield
            return

        async with GitHubClient(rate_monitor=RateLimitMonitor()) as client:
            app.state.counter = PullRequestCounter(client)
            logger.info("Counter ready (cache enabled: {})", app.state.counter.use_cache)
            yield

    app = FastAPI(
        title="GitHub PR Count",
        description="Counts a GitHub repository's pull requests",
        version=__version__,
        lifespan=lifespan,
    )
    if counter is not None:
        app.state.counter = counter

    app.add_exception_handler(GitHubClientError, _handle_count_error)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        """Liveness check."""
        return {"status": "ok"}

    @app.get("/github/pull-requests/count", response_model=CountResult, tags=["Count"])
    async def count_from_metadata(
        owner: OwnerQuery, repo: RepoQuery, pr_counter: CounterDep
    ) -> CountResult:
        """Count pull requests from pagination metadata (one upstream call)."""
        repository = RepositoryRef(owner=owner, repo=repo)
        return await pr_counter.count(repository, CountStrategy.METADATA)

    @app.get(
        "/github/pull-requests/count/concurrent",
        response_model=CountResult,
        tags=["Count"],
    )
    async def count_concurrent(
        owner: OwnerQuery, repo: RepoQuery, pr_counter: CounterDep
    ) -> CountResult:
        """Count pull requests by scanning every page concurrently."""
        repository = RepositoryRef(owner=owner, repo=repo)
        return await pr_counter.count(repository, CountStrategy.CONCURRENT)

    @app.get(
        "/github/pull-requests/count/search",
        response_model=CountResult,
        tags=["Count"],
    )
    async def count_from_search(
        owner: OwnerQuery, repo: RepoQuery, pr_counter: CounterDep
    ) -> CountResult:
        """Count pull requests with the search API (index may lag)."""
        repository = RepositoryRef(owner=owner, repo=repo)
        return await pr_counter.count(repository, CountStrategy.SEARCH)

    return app
