"""KQLSentry CLI - Main entry point."""

import logging
import sys
from typing import Annotated

import typer

import kqlsentry
from kqlsentry.cli.context import CLIContext, get_policy

# Create main Typer app
app = typer.Typer(
    name="kqlsentry",
    help="KQLSentry CLI - Security gate for LLM-generated queries",
    no_args_is_help=True,
)

# Store CLI context globally (will be set in callback)
state: dict[str, CLIContext] = {}


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log validator decisions to stderr",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    cli_ctx = CLIContext(
        policy=get_policy(),
        json_output=json_output,
    )

    # Store in Typer context for command access
    ctx.obj = cli_ctx
    state["cli_ctx"] = cli_ctx


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"KQLSentry v{kqlsentry.__version__}")


# Register command groups
from kqlsentry.cli.commands import query  # noqa: E402

app.add_typer(query.app, name="query")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
