"""CLI entry point for the quote aggregation pipeline.

This module provides the command-line interface for pricing a product
across many shops concurrently, with progress indicators and a rich
results table.
"""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from src.executor import shutdown_shared_executor
from src.models.config import ConfigManager, PipelineConfig
from src.models.data_models import Outcome, PipelineResult
from src.pipeline.orchestrator import PipelineOrchestrator
from src.pipeline.output import JSONOutputFormatter


console = Console()


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default="config/config.yaml",
    help="Path to configuration YAML file",
)
@click.option(
    "--query",
    "-q",
    type=str,
    help="Product to price (overrides config)",
)
@click.option(
    "--shop",
    "-s",
    "shops",
    multiple=True,
    help="Shop to query; repeat for several (overrides config)",
)
@click.option(
    "--workers",
    "-w",
    type=int,
    help="Number of worker threads in the shared pool (overrides config)",
)
@click.option(
    "--timeout",
    "-t",
    type=float,
    help="Seconds to wait for each shop (overrides config)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output JSON file path (overrides config)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides config)",
)
@click.option(
    "--stream",
    is_flag=True,
    help="Print each shop's result as soon as it arrives",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress bars (useful for CI/CD)",
)
@click.version_option(version="1.0.0", prog_name="quote-pipeline")
def main(
    config: Path,
    query: Optional[str],
    shops: Tuple[str, ...],
    workers: Optional[int],
    timeout: Optional[float],
    output: Optional[Path],
    log_level: Optional[str],
    stream: bool,
    no_progress: bool,
) -> None:
    """
    Quote Pipeline - Concurrent price lookup across many shops.

    Asks every shop for a quote on a shared, bounded worker pool, parses
    each quote, applies its discount code, and reports one result per
    shop in the order the shops were given.

    Examples:

        # Run with default configuration
        $ python -m src.pipeline.main

        # Price another product at two shops
        $ python -m src.pipeline.main -q iPad -s ShopA -s ShopB

        # Print results as they arrive
        $ python -m src.pipeline.main --stream --no-progress
    """
    try:
        cli_overrides = {}
        if query is not None:
            cli_overrides["query"] = query
        if shops:
            cli_overrides["shops"] = list(shops)
        if workers is not None:
            cli_overrides["worker_pool_size"] = workers
        if timeout is not None:
            cli_overrides["per_call_timeout"] = timeout
        if log_level is not None:
            cli_overrides["log_level"] = log_level.upper()

        config_manager = ConfigManager(config)
        pipeline_config = config_manager.load_config(cli_overrides)

        output_path = output if output else pipeline_config.output_path

        _display_config_summary(pipeline_config, no_progress)

        result = _run_pipeline_with_progress(pipeline_config, no_progress, stream)

        formatter = JSONOutputFormatter()
        formatter.save(result, str(output_path))

        _display_results(result, output_path, no_progress)

        sys.exit(0)

    except KeyboardInterrupt:
        console.print("\n[yellow]Pipeline interrupted by user[/yellow]")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        console.print(f"\n[red]Error:[/red] {escape(str(e))}", style="bold red")
        if "--debug" in sys.argv:
            console.print_exception()
        sys.exit(1)
    finally:
        # Abandoned chains finish in the background.
        shutdown_shared_executor(wait=False)


def _format_outcome_line(outcome: Outcome) -> str:
    if outcome.succeeded:
        return f"[green]✓[/green] {escape(outcome.describe())}"
    return f"[red]✗[/red] {escape(outcome.describe())}"


def _run_pipeline_with_progress(
    config: PipelineConfig,
    no_progress: bool,
    stream: bool,
) -> PipelineResult:
    """
    Run the pipeline with progress tracking.

    Args:
        config: Pipeline configuration
        no_progress: Whether to disable progress bars
        stream: Whether to print outcomes in completion order

    Returns:
        Pipeline execution result
    """
    orchestrator = PipelineOrchestrator(config)

    if no_progress:
        console.print("[cyan]Querying shops...[/cyan]")
        if stream:
            return orchestrator.run(lambda outcome: console.print(_format_outcome_line(outcome)))
        return orchestrator.run()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task(
            f"[cyan]Querying {len(config.shops)} shops...",
            total=len(config.shops),
        )

        def _on_outcome(outcome: Outcome) -> None:
            progress.console.print(_format_outcome_line(outcome))
            progress.advance(task_id)

        result = orchestrator.run(_on_outcome if stream else None)
        progress.update(task_id, completed=len(config.shops))
        return result


def _display_config_summary(config: PipelineConfig, no_progress: bool) -> None:
    """Display configuration summary before running."""
    if no_progress:
        return

    console.print("\n[bold cyan]Pipeline Configuration[/bold cyan]")
    console.print(f"  Query: {config.query}")
    console.print(f"  Shops: {len(config.shops)}")
    console.print(f"  Workers: {config.worker_pool_size}")
    console.print(f"  Timeout: {config.per_call_timeout}s per shop")
    console.print()


def _display_results(
    result: PipelineResult,
    output_path: Path,
    no_progress: bool,
) -> None:
    """Display final results summary."""
    if no_progress:
        for outcome in result.outcomes:
            console.print(escape(outcome.describe()))
        console.print(
            f"✓ Done in {result.summary.processing_time_seconds * 1000:.0f} msecs: "
            f"{result.summary.succeeded}/{result.summary.total_providers} shops"
        )
        console.print(f"✓ Output saved to: {output_path}")
        return

    console.print("\n[bold green]Pipeline Complete![/bold green]\n")

    outcome_table = Table(title=f"Prices for {result.query}")
    outcome_table.add_column("Shop", style="cyan")
    outcome_table.add_column("Status", justify="center")
    outcome_table.add_column("Result")

    for outcome in result.outcomes:
        status = "[green]ok[/green]" if outcome.succeeded else "[red]failed[/red]"
        detail = outcome.value if outcome.succeeded else str(outcome.error)
        outcome_table.add_row(escape(outcome.provider), status, escape(detail or ""))

    console.print(outcome_table)
    console.print()

    summary_table = Table(title="Execution Summary", show_header=False)
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")

    summary_table.add_row("Shops", str(result.summary.total_providers))
    summary_table.add_row("Succeeded", str(result.summary.succeeded))
    summary_table.add_row("Failed", str(result.summary.failed))
    summary_table.add_row(
        "Processing Time",
        f"{result.summary.processing_time_seconds:.2f}s",
    )
    summary_table.add_row(
        "Success Rate",
        f"{result.summary.success_rate * 100:.1f}%",
    )

    console.print(summary_table)
    console.print()

    console.print(f"[bold]Output saved to:[/bold] {output_path}")
    console.print()


if __name__ == "__main__":
    main()
