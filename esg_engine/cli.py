# -*- coding: utf-8 -*-
"""
esg-engine - command line access to the ESG engine actions

Each command reads a JSON or YAML payload, runs the matching service
action and prints a summary table. ``--output`` writes the full result
as JSON.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from esg_engine import __version__
from esg_engine.config import get_config
from esg_engine.exceptions import EsgEngineError
from esg_engine.setup import get_service

app = typer.Typer(
    name="esg-engine",
    help="GHG accounting and ESG target tracking",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


def _load_input(input_file: str) -> Any:
    input_path = Path(input_file)
    if not input_path.exists():
        console.print(f"[red]Input file not found: {input_file}[/red]")
        raise typer.Exit(1)

    if input_path.suffix == ".json":
        with open(input_path) as f:
            return json.load(f)
    if input_path.suffix in [".yaml", ".yml"]:
        with open(input_path) as f:
            return yaml.safe_load(f)

    console.print(f"[red]Unsupported input format: {input_path.suffix}[/red]")
    console.print("[yellow]Use .json or .yaml files[/yellow]")
    raise typer.Exit(1)


def _write_output(result: Dict[str, Any], output: Optional[str]) -> None:
    if not output:
        return
    with open(output, "w") as f:
        json.dump(result, f, indent=2, default=str)
    console.print(f"[green]✓[/green] Result written to {output}")


def _run(action: str, params: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return get_service().dispatch(action, params)
    except EsgEngineError as e:
        console.print(f"[red]Error: {e.message}[/red] [dim]({e.error_code})[/dim]")
        raise typer.Exit(1)


@app.command()
def version():
    """Show esg-engine version"""
    console.print(f"[bold green]esg-engine v{__version__}[/bold green]")


@app.command()
def calculate(
    input_file: str = typer.Option(..., "--input", "-I", help="Payload with consumption, employees, revenue"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Override the payload region"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write full result as JSON"),
):
    """
    Calculate a three-scope carbon report

    Example:
        esg-engine calculate --input company.json --region europe
    """
    payload = _load_input(input_file)
    if not isinstance(payload, dict):
        console.print("[red]Payload must be a mapping[/red]")
        raise typer.Exit(1)
    if region:
        payload["region"] = region

    result = _run("calculate_carbon", payload)
    data = result["data"]

    table = Table(title="Emissions by Scope", box=box.ROUNDED)
    table.add_column("Scope", style="cyan")
    table.add_column("kg CO2e", justify="right")
    table.add_column("Share", justify="right")
    for scope in ("scope1", "scope2", "scope3"):
        table.add_row(
            scope.replace("scope", "Scope "),
            f"{data[scope]['total']:,.2f}",
            f"{data['scope_shares'][scope]:.2f}%",
        )
    table.add_row("[bold]Total[/bold]", f"[bold]{data['total_emissions_kg']:,.2f}[/bold]", "")
    console.print(table)

    console.print(
        f"Region: {data['region']}  |  "
        f"Per employee: {data['per_employee']:,.2f} kg  |  "
        f"Intensity: {data['carbon_intensity']:,.2f} kg/k revenue"
    )
    if data["factor_resolution"]["fallback_applied"]:
        console.print(
            f"[yellow]⚠ Region '{data['factor_resolution']['region_requested']}' "
            f"unknown, used '{data['region']}' factors[/yellow]"
        )
    if data["recommendations"]:
        console.print(Panel(
            "\n".join(f"• {r}" for r in data["recommendations"]),
            title="[bold green]Recommendations[/bold green]",
            border_style="green",
        ))
    _write_output(result, output)


@app.command()
def track(
    input_file: str = typer.Option(..., "--input", "-I", help="List of targets, or {targets: [...]}"),
    now: Optional[str] = typer.Option(None, "--now", help="Evaluation time (ISO-8601), default now"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write full result as JSON"),
):
    """Track reduction targets against time-based pacing"""
    payload = _load_input(input_file)
    targets = payload.get("targets", []) if isinstance(payload, dict) else payload

    result = _run("track_targets", {"targets": targets, "now": now})
    data = result["data"]

    table = Table(title="Reduction Targets", box=box.ROUNDED)
    table.add_column("Target", style="cyan")
    table.add_column("Progress", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Status")
    table.add_column("Annual reduction", justify="right")
    for t in data["targets"]:
        status = "[green]on track[/green]" if t["on_track"] else "[red]behind[/red]"
        table.add_row(
            t["name"],
            f"{t['progress_percent']:.0f}%",
            f"{t['expected_progress_percent']:.0f}%",
            status,
            f"{t['annual_reduction_needed']:,.2f}",
        )
    console.print(table)

    summary = data["summary"]
    console.print(
        f"{summary['total_targets']} targets: {summary['on_track']} on track, "
        f"{summary['at_risk']} at risk, {summary['not_started']} not started"
    )
    for err in data["errors"]:
        console.print(
            f"[yellow]⚠ Skipped target {err['index']} ({err['item'] or 'unnamed'}): "
            f"{err['message']}[/yellow]"
        )
    _write_output(result, output)


@app.command()
def offsets(
    emissions_tons: float = typer.Argument(..., help="Tonnes CO2e to offset"),
    budget: Optional[float] = typer.Option(None, "--budget", "-b", help="Spending cap"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write full result as JSON"),
):
    """Rank carbon offset providers under an optional budget"""
    result = _run("get_offset_options", {"emissions_tons": emissions_tons, "budget": budget})
    data = result["data"]

    table = Table(title=f"Offset Options for {emissions_tons:,.2f} t", box=box.ROUNDED)
    table.add_column("Provider", style="cyan")
    table.add_column("Type")
    table.add_column("Rating", justify="right")
    table.add_column("Price/t", justify="right")
    table.add_column("Total", justify="right")
    for q in data["options"]:
        table.add_row(
            q["name"], q["type"], f"{q['rating']:.1f}",
            f"{q['price_per_ton']:,.2f}", f"{q['total_cost']:,.2f}",
        )
    console.print(table)

    if not data["budget_feasible"]:
        console.print(f"[yellow]⚠ No provider fits the budget of {budget:,.2f}[/yellow]")
    if data["recommended"]:
        console.print(f"Recommended: [bold]{data['recommended']['name']}[/bold]")
    _write_output(result, output)


@app.command()
def benchmarks(
    industry: Optional[str] = typer.Option(None, "--industry", "-i", help="Industry key"),
):
    """Show the industry E/S/G benchmark and the cross-industry average"""
    data = _run("get_benchmarks", {"industry": industry})["data"]

    table = Table(title=f"Benchmark: {data['industry']}", box=box.ROUNDED)
    table.add_column("Dimension", style="cyan")
    table.add_column("Industry", justify="right")
    table.add_column("Market average", justify="right")
    for dim in ("environmental", "social", "governance"):
        table.add_row(
            dim, f"{data['benchmark'][dim]:.0f}", f"{data['market_average'][dim]:.0f}"
        )
    console.print(table)


@app.command()
def assess(
    input_file: str = typer.Option(..., "--input", "-I", help="Payload with scores and industry"),
    industry: Optional[str] = typer.Option(None, "--industry", "-i", help="Override the payload industry"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write full result as JSON"),
):
    """Compare assessed E/S/G scores with the industry benchmark"""
    payload = _load_input(input_file)
    if not isinstance(payload, dict):
        console.print("[red]Payload must be a mapping[/red]")
        raise typer.Exit(1)
    if industry:
        payload["industry"] = industry

    result = _run("assess_esg_risk", payload)
    data = result["data"]

    table = Table(title=f"ESG vs {data['industry']}", box=box.ROUNDED)
    table.add_column("Dimension", style="cyan")
    table.add_column("Assessed", justify="right")
    table.add_column("Benchmark", justify="right")
    table.add_column("Delta", justify="right")
    for dim in ("environmental", "social", "governance"):
        delta = data["comparison"][f"vs_industry_{dim}"]
        colour = "green" if delta >= 0 else "red"
        table.add_row(
            dim,
            f"{data['assessed'][dim]:.1f}",
            f"{data['industry_benchmark'][dim]:.1f}",
            f"[{colour}]{delta:+.2f}[/{colour}]",
        )
    console.print(table)
    _write_output(result, output)


@app.command()
def suppliers(
    input_file: str = typer.Option(..., "--input", "-I", help="List of suppliers, or {suppliers: [...]}"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write full result as JSON"),
):
    """Summarize a supplier list"""
    payload = _load_input(input_file)
    items = payload.get("suppliers", []) if isinstance(payload, dict) else payload

    result = _run("analyze_supply_chain", {"suppliers": items})
    data = result["data"]

    console.print(
        f"{data['total_suppliers']} suppliers, total spend {data['total_spend']:,.2f}, "
        f"countries: {', '.join(data['geographic_distribution']) or '-'}"
    )
    table = Table(title="Spend by Category", box=box.ROUNDED)
    table.add_column("Category", style="cyan")
    table.add_column("Spend", justify="right")
    for category, spend in data["spend_by_category"].items():
        table.add_row(category, f"{spend:,.2f}")
    console.print(table)
    _write_output(result, output)


@app.command()
def batch(
    input_file: str = typer.Option(..., "--input", "-I", help="List of calculate requests"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write full result as JSON"),
):
    """Calculate carbon reports for many companies in parallel"""
    payload = _load_input(input_file)
    requests = payload.get("requests", []) if isinstance(payload, dict) else payload

    result = get_service().calculate_carbon_batch(requests)

    console.print(
        f"[green]✓[/green] {result.successful_count} reports, "
        f"{result.failed_count} failed, total {result.total_emissions_kg:,.2f} kg CO2e "
        f"in {result.batch_duration_seconds:.2f}s"
    )
    for err in result.errors:
        console.print(f"[yellow]⚠ Request {err.index}: {err.message} ({err.error_code})[/yellow]")
    _write_output(result.to_dict(), output)


@app.command()
def health():
    """Show service health"""
    console.print_json(data=get_service().health_check())


def main():
    """Console entry point."""
    logging.basicConfig(
        level=getattr(logging, get_config().log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app()


if __name__ == "__main__":
    main()
