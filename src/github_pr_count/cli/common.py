"""Common CLI option factories and helpers.

This module centralizes reusable CLI options to reduce duplication
and consolidate noqa comments for Typer's required function call pattern.

It also provides:
- `run_async_command`: Unified async execution with error handling for CLI commands
- Repository argument type alias and validation
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Annotated, TypeVar

import typer
from rich.console import Console

from github_pr_count.github.counting import CountStrategy, OutputFormat
from github_pr_count.schemas import RepositoryRef

# Shared console instance for CLI output
console = Console()

T = TypeVar("T")

EXIT_FAILURE = 1
EXIT_MISSING_CREDENTIAL = 2
EXIT_RATE_LIMITED = 3


def run_async_command(
    coro: Coroutine[object, object, T],
    *,
    error_prefix: str = "Error",
) -> T:
    """Execute async code from synchronous CLI command with unified error handling.

    Uses asyncio.run() for clean event loop management. Catches exceptions,
    prints user-friendly error messages, and exits with code 1.

    Args:
        coro: Async coroutine to execute
        error_prefix: Prefix for error messages (default: "Error")

    Returns:
        Result from the coroutine

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return asyncio.run(coro)
    except typer.Exit:
        # Re-raise deliberate exits (e.g., from error classification)
        raise
    except Exception as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(EXIT_FAILURE) from None


# Typer requires function calls as default arguments, which triggers B008.
# Using Annotated with a centralized type alias keeps the noqa in one place.

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]
"""Output format option type for CLI commands.

Usage:
    def command(output_format: OutputFormatOption = OutputFormat.TEXT):
"""

StrategyOption = Annotated[
    CountStrategy,
    typer.Option(
        "--strategy",
        "-s",
        help="Counting strategy",
    ),
]
"""Counting strategy option type.

Usage:
    def count(strategy: StrategyOption = CountStrategy.CONCURRENT):
"""

RepoArgument = Annotated[
    str,
    typer.Argument(
        help="Repository in owner/name format (e.g., octocat/hello-world)",
    ),
]
"""Required positional repository argument.

Usage:
    def count(repo: RepoArgument) -> None:
"""


def validate_repo(repo: str) -> RepositoryRef:
    """Parse and validate a single repository string.

    Args:
        repo: Repository string in owner/name format

    Returns:
        RepositoryRef for the repository

    Raises:
        typer.Exit(1): If format is invalid
    """
    try:
        return RepositoryRef.from_full_name(repo)
    except ValueError:
        console.print("[red]Error:[/red] Repository must be in owner/name format")
        raise typer.Exit(EXIT_FAILURE) from None
