"""Typer CLI for the mesh console metrics service.

Commands:
  serve        Run the metrics API with uvicorn
  expressions  Show the time range and PromQL a request would execute (no I/O)
  check        Run the namespace access check against the cluster directory
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from mesh_console.models import ConsoleConfig
from workload_metrics import (
    ParameterValidationError,
    build_expressions,
    parse_query_params,
    resolve_time_range,
)

app = typer.Typer(
    name="mesh-console",
    help="Workload traffic metrics for the mesh console",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    log_level: Annotated[
        str, typer.Option("--log-level", "-l", help="Python logging level")
    ] = "INFO",
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_params(params: list[str]) -> dict[str, list[str]]:
    """Parse key=value strings into a multi-valued parameter mapping."""
    parsed: dict[str, list[str]] = {}
    for item in params:
        if "=" not in item:
            console.print(f"[red]Invalid parameter format: '{item}'. Use key=value[/red]")
            raise typer.Exit(1)
        key, value = item.split("=", 1)
        parsed.setdefault(key.strip(), []).append(value.strip())
    return parsed


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Bind address")] = "0.0.0.0",
    port: Annotated[int, typer.Option(help="Bind port")] = 8000,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
) -> None:
    """Run the metrics API."""
    import uvicorn

    uvicorn.run("mesh_console.api:app", host=host, port=port, reload=reload)


@app.command()
def expressions(
    namespace: Annotated[str, typer.Argument(help="Workload namespace")],
    workload: Annotated[str, typer.Argument(help="Workload name")],
    param: Annotated[
        list[str] | None,
        typer.Option("--param", "-p", help="Query parameter (key=value), repeatable"),
    ] = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text or json")
    ] = "text",
) -> None:
    """Show the resolved range and expressions for a metrics request."""
    config = ConsoleConfig()
    try:
        spec = parse_query_params(_parse_params(param or []), config.defaults)
    except ParameterValidationError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1) from None

    time_range = resolve_time_range(spec)
    rendered = build_expressions(namespace, workload, spec)
    step_seconds = int(time_range.step.total("seconds"))

    if format == "json":
        payload = {
            "start": time_range.start.format_iso(),
            "end": time_range.end.format_iso(),
            "step": step_seconds,
            "expressions": [expression.model_dump() for expression in rendered],
        }
        console.print_json(json.dumps(payload))
        return

    start, end = time_range.start.format_iso(), time_range.end.format_iso()
    console.print(f"[bold]Range:[/bold] {start} → {end}")
    console.print(f"[bold]Step:[/bold] {step_seconds}s")
    table = Table(title=f"Expressions for {namespace}/{workload}")
    table.add_column("Family", style="cyan")
    table.add_column("Quantile")
    table.add_column("Expression", overflow="fold")
    for expression in rendered:
        quantile = "" if expression.quantile is None else str(expression.quantile)
        table.add_row(expression.family, quantile, expression.text)
    console.print(table)


@app.command()
def check(namespace: Annotated[str, typer.Argument(help="Namespace to check")]) -> None:
    """Check whether the console may read a namespace."""
    from mesh_console.backends import KubernetesDirectory

    config = ConsoleConfig()

    async def run():
        directory = KubernetesDirectory.from_config(config)
        try:
            return await directory.check_namespace_access(namespace)
        finally:
            await directory.aclose()

    decision = asyncio.run(run())
    if decision.allowed:
        console.print(f"[green]✓[/green] namespace '{namespace}' is accessible")
        return
    console.print(f"[red]✗[/red] namespace '{namespace}' is not accessible: {decision.reason}")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
