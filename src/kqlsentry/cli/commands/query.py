"""Query validation commands."""

from pathlib import Path
from typing import Annotated

import typer

from kqlsentry.cli.context import CLIContext
from kqlsentry.cli.output import OutputFormatter
from kqlsentry.core.types import Dialect
from kqlsentry.exceptions import KQLSentryError
from kqlsentry.query.escaping import escape_value
from kqlsentry.query.execution import clamp_options
from kqlsentry.query.patterns import ALLOWED_RESOURCE_TYPES

# Create query subcommand group
app = typer.Typer(help="Validate queries and prepare values for query generation")


@app.command("validate")
def query_validate(
    ctx: typer.Context,
    query: Annotated[
        str | None,
        typer.Argument(help="Query to validate"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load query from file"),
    ] = None,
    dialect: Annotated[
        str,
        typer.Option("--dialect", "-D", help="Query dialect: kql or resourcegraph"),
    ] = "kql",
    no_time_filter: Annotated[
        bool,
        typer.Option("--no-time-filter", help="Do not warn about a missing time filter"),
    ] = False,
    max_lookback_days: Annotated[
        float | None,
        typer.Option("--max-lookback-days", help="Block ago() look-backs longer than this"),
    ] = None,
) -> None:
    """Validate a query without executing it.

    Exits with code 1 when the query is blocked.

    Examples:

        kqlsentry query validate "Perf | where TimeGenerated > ago(1h) | take 10"
        kqlsentry query validate --file query.kql --max-lookback-days 10
        kqlsentry query validate -D resourcegraph "Resources | project name"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        # Get query from argument or file
        if from_file:
            query_text = Path(from_file).read_text()
        elif query:
            query_text = query
        else:
            raise typer.BadParameter("Either provide a query or use --file")

        parsed_dialect = Dialect.parse(dialect)
        options = cli_ctx.policy.validation_options(parsed_dialect)
        overrides: dict[str, object] = {}
        if no_time_filter:
            overrides["require_time_filter"] = False
        if max_lookback_days is not None:
            overrides["max_lookback_days"] = max_lookback_days
        if overrides:
            options = options.model_copy(update=overrides)

        result = cli_ctx.get_validator(parsed_dialect).validate(query_text, options)
    except (KQLSentryError, typer.BadParameter, OSError) as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    formatter.print_validation(result)
    if not result.valid:
        raise typer.Exit(code=1)


@app.command("tables")
def query_tables(
    ctx: typer.Context,
    dialect: Annotated[
        str,
        typer.Option("--dialect", "-D", help="Query dialect: kql or resourcegraph"),
    ] = "kql",
) -> None:
    """List the tables a query may start from.

    Examples:

        kqlsentry query tables
        kqlsentry --json query tables -D resourcegraph
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        parsed_dialect = Dialect.parse(dialect)
    except KQLSentryError as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)

    tables = cli_ctx.get_validator(parsed_dialect).allowed_tables
    if cli_ctx.json_output:
        data: dict[str, object] = {"dialect": parsed_dialect.value, "tables": list(tables)}
        if parsed_dialect == Dialect.RESOURCE_GRAPH:
            data["resource_types"] = list(ALLOWED_RESOURCE_TYPES)
        formatter.print_data(data)
    else:
        formatter.print_table(
            f"Allowed {parsed_dialect.value} tables",
            [{"Table": t} for t in tables],
            ["Table"],
        )


@app.command("escape")
def query_escape(
    ctx: typer.Context,
    value: Annotated[str, typer.Argument(help="Value to escape for a quoted literal")],
) -> None:
    """Escape a value for interpolation into a single-quoted literal.

    Examples:

        kqlsentry query escape "O'Brien"
    """
    cli_ctx: CLIContext = ctx.obj
    escaped = escape_value(value)
    if cli_ctx.json_output:
        OutputFormatter(True).print_data({"value": value, "escaped": escaped})
    else:
        typer.echo(escaped)


@app.command("clamp")
def query_clamp(
    ctx: typer.Context,
    max_results: Annotated[
        int | None,
        typer.Option("--max-results", "-n", help="Requested row count"),
    ] = None,
    timeout_ms: Annotated[
        int | None,
        typer.Option("--timeout-ms", "-t", help="Requested timeout in milliseconds"),
    ] = None,
) -> None:
    """Show the execution options that would actually be applied.

    Examples:

        kqlsentry query clamp --max-results 999999 --timeout-ms 1
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)
    policy = cli_ctx.policy

    options = clamp_options(
        max_results,
        timeout_ms,
        default_max_results=policy.default_max_results,
        max_results_limit=policy.max_results_limit,
        default_timeout_ms=policy.default_timeout_ms,
        max_timeout_ms=policy.max_timeout_ms,
    )
    if cli_ctx.json_output:
        formatter.print_data(options.model_dump())
    else:
        formatter.print_success("Execution options", options.model_dump())
