"""Count command for GitHub PR Count."""

import json
from typing import Any

import typer
from rich.table import Table

from github_pr_count.cli.common import (
    EXIT_FAILURE,
    EXIT_MISSING_CREDENTIAL,
    EXIT_RATE_LIMITED,
    OutputFormatOption,
    RepoArgument,
    StrategyOption,
    console,
    run_async_command,
    validate_repo,
)
from github_pr_count.github import (
    CountStrategy,
    GitHubClient,
    GitHubClientError,
    MissingCredentialError,
    OutputFormat,
    PoolRateLimit,
    PullRequestCounter,
    RateLimitExceededError,
    RateLimitMonitor,
    RateLimitPool,
)


def _format_time_remaining(seconds: int) -> str:
    """Format seconds as human-readable time."""
    if seconds <= 0:
        return "Now"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def _print_quota(monitor: RateLimitMonitor) -> None:
    """Print the quota reported by GitHub during the count."""
    pools: list[tuple[RateLimitPool, PoolRateLimit]] = []
    for pool in RateLimitPool:
        pool_limit = monitor.get_pool_limit(pool)
        if pool_limit is not None:
            pools.append((pool, pool_limit))
    if not pools:
        console.print("[dim]No rate limit headers received.[/dim]")
        return

    table = Table(title="GitHub API Rate Limits")
    table.add_column("Pool", style="bold")
    table.add_column("Remaining", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Remaining %", justify="right")
    table.add_column("Resets In", justify="right")

    for pool, pool_limit in pools:
        remaining_pct = pool_limit.remaining_percent
        if remaining_pct >= 50:
            pct_str = f"[green]{remaining_pct:.1f}%[/green]"
        elif remaining_pct >= 10:
            pct_str = f"[yellow]{remaining_pct:.1f}%[/yellow]"
        else:
            pct_str = f"[red]{remaining_pct:.1f}%[/red]"

        table.add_row(
            pool.value,
            str(pool_limit.remaining),
            str(pool_limit.limit),
            pct_str,
            _format_time_remaining(pool_limit.seconds_until_reset),
        )

    console.print()
    console.print(table)


def count(
    repo: RepoArgument,
    strategy: StrategyOption = CountStrategy.CONCURRENT,
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Scan every page without consulting the count cache",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        min=0.001,
        help="Abandon the count after this many seconds",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
    show_quota: bool = typer.Option(
        False,
        "--show-quota",
        help="Show the API quota reported by GitHub after counting",
    ),
) -> None:
    """Count the pull requests of a repository.

    Exit codes: 0 success, 1 invalid input or upstream failure,
    2 missing GitHub token, 3 rate limit retries exhausted.

    Examples:
        ghprcount count octocat/hello-world
        ghprcount count octocat/hello-world --strategy metadata
        ghprcount count octocat/hello-world --strategy search --format json
        ghprcount -v count octocat/hello-world --no-cache --show-quota
    """
    repository = validate_repo(repo)
    monitor = RateLimitMonitor()

    async def _count() -> int:
        try:
            async with GitHubClient(rate_monitor=monitor) as client:
                counter = PullRequestCounter(client, use_cache=False if no_cache else None)
                result = await counter.count(repository, strategy, timeout=timeout)
                return result.count
        except MissingCredentialError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(EXIT_MISSING_CREDENTIAL) from None
        except RateLimitExceededError as e:
            console.print(f"[red]Error:[/red] {e}")
            if e.retry_after is not None:
                console.print(f"  GitHub asked to wait {e.retry_after}s")
            raise typer.Exit(EXIT_RATE_LIMITED) from None
        except GitHubClientError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(EXIT_FAILURE) from None

    pr_count = run_async_command(_count(), error_prefix="Count failed")

    # JSON output
    if output_format == OutputFormat.JSON:
        result: dict[str, Any] = {"count": pr_count}
        if show_quota:
            result["rate_limit"] = monitor.to_dict()
        console.print_json(json.dumps(result))
        return

    # Text output
    console.print(
        f"[bold]{repository.full_name}[/bold]: {pr_count} pull request(s) "
        f"[dim]({strategy.value})[/dim]"
    )
    if show_quota:
        _print_quota(monitor)
