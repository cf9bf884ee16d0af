# src/cli/runner.py

"""Scheduled-task runners: one collection cycle, or one aggregation pass."""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings, TrackerConfig
from src.fetchers.retail_prices_client import RetailPricesClient
from src.models.outcomes import LocalSaveStatus, SaveStatus
from src.services.price_aggregator import run_aggregation
from src.services.spot_price_collector import (
    CollectionSummary,
    SpotPriceCollector,
)
from src.storage.github_dataset_store import GitHubDatasetStore
from src.storage.local_snapshot_store import LocalSnapshotStore

logger = logging.getLogger("spot_tracker.cli")

# Stderr console for status messages
_err = Console(stderr=True)


def build_collector(config: TrackerConfig) -> SpotPriceCollector:
    """Wire the production client and stores around *config*."""
    return SpotPriceCollector(
        config=config,
        fetcher=RetailPricesClient(),
        remote_store=GitHubDatasetStore(config),
        local_store=LocalSnapshotStore(),
    )


def _print_summary(summary: CollectionSummary) -> None:
    """Render region prices and storage outcomes to stderr."""
    table = Table(
        title="Spot Prices",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Region", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Price/hour", justify="right", style="green")
    table.add_column("Location", style="dim")

    for region in Settings.REGIONS:
        key = region["name"]
        sample = summary.record.regions.get(key)
        if sample is None:
            table.add_row(region["display_name"], "[red]❌ FAILED[/red]", "—", "")
        else:
            table.add_row(
                region["display_name"],
                "[green]✅ OK[/green]",
                f"{sample.currency_code} {sample.retail_price}",
                sample.location,
            )
    _err.print(table)

    if summary.local_status is LocalSaveStatus.SAVED:
        _err.print("[dim]Local snapshot saved[/dim]")
    elif summary.local_status is LocalSaveStatus.SKIPPED_READONLY:
        _err.print("[dim]Local snapshot skipped (read-only filesystem)[/dim]")
    else:
        _err.print("[yellow]⚠ Local snapshot could not be written[/yellow]")

    remote = summary.remote
    if remote.ok:
        _err.print(
            f"[green]✓ Dataset {remote.status.value} on GitHub "
            f"({summary.dataset_length} records)[/green]"
        )
    elif remote.status is SaveStatus.NOT_CONFIGURED:
        _err.print(
            "[yellow]GitHub credentials not configured. "
            "Skipping GitHub push.[/yellow]"
        )
    else:
        code = remote.status_code if remote.status_code else "n/a"
        _err.print(
            f"[red]✗ GitHub push {remote.status.value} (HTTP {code})[/red]"
        )


async def run_collection(config: TrackerConfig | None = None) -> int:
    """Run one collection cycle; degraded runs still return 0."""
    config = config or TrackerConfig.from_env()
    _err.print("[bold]=== Azure Spot Price Checker Started ===[/bold]")

    summary = await build_collector(config).run()
    _print_summary(summary)

    _err.print("[bold]=== Price Check Complete ===[/bold]")
    return 0


def run_aggregate(
    source: Path | None = None,
    output: Path | None = None,
) -> int:
    """Rebuild the dashboard summary from the raw dataset file."""
    source = source or Settings.RAW_DATASET_PATH
    output = output or Settings.SUMMARY_PATH

    try:
        summary = run_aggregation(source, output)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.error("Error processing data: %s", exc, exc_info=True)
        _err.print(f"[red]Error processing data: {exc}[/red]")
        return 1

    regions = ", ".join(summary["regions"]) or "none"
    _err.print(f"[green]✓ Processed data written to {output}[/green]")
    _err.print(f"[dim]Regions processed: {regions}[/dim]")
    return 0
