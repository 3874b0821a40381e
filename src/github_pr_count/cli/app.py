"""Main CLI application for GitHub PR Count."""

from pathlib import Path
from typing import Annotated

import typer
import uvicorn
from rich.console import Console

from github_pr_count import __version__
from github_pr_count.cli import count as count_cmd
from github_pr_count.config import get_settings
from github_pr_count.logging import setup_logging

app = typer.Typer(
    name="ghprcount",
    help="Count the pull requests of a GitHub repository.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ghprcount version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """GitHub PR Count - count a repository's pull requests."""
    settings = get_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", min=1, max=65535, help="Port to listen on"),
) -> None:
    """Serve the pull request count HTTP API.

    Examples:
        ghprcount serve
        ghprcount serve --host 0.0.0.0 --port 8080
    """
    from github_pr_count.api import create_app

    console.print(f"Serving on [bold]http://{host}:{port}[/bold]")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


# Register commands
app.command("count")(count_cmd.count)


if __name__ == "__main__":
    app()
