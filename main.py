"""
Main CLI entry point for the Titan payout reconciler.
"""

import sys
from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from analysis.reconciliation import ReconciliationReporter, run_reconciliation
from config import Config, parse_periods
from reconciler.exceptions import DuplicateReceiptError, ReconciliationError
from reconciler.receipt_source import iter_receipts
from reconciler.timeline import PeriodSet
from reconciler.utils import setup_logging

console = Console()
err_console = Console(stderr=True)


def _resolve_periods(periods):
    periods = parse_periods(periods) if periods else Config.PERIODS
    errors = Config.validate(periods=periods)
    if errors:
        err_console.print("[bold red]Configuration errors:[/bold red]")
        for error in errors:
            err_console.print(f"  ❌ {error}")
        sys.exit(1)
    return periods


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug):
    """Titan payout reconciler - audit minting receipts against farming policy 2."""
    log_level = "DEBUG" if debug else Config.LOG_LEVEL
    setup_logging(log_level, Config.LOG_FILE or None)


@cli.command()
@click.option("--receipts-dir", type=click.Path(file_okay=False), default=None,
              help="Directory with one folder of receipts per period")
@click.option("--periods", default=None, help="Comma separated period identifiers")
@click.option("--skip-unlisted-periods", is_flag=True,
              help="Ignore period directories that are not in the period list")
@click.option("--output", type=click.Path(dir_okay=False, writable=True), default=None,
              help="Write the CSV report to a file instead of stdout")
@click.option("--format", "output_format", type=click.Choice(["csv", "rich"]), default="csv")
def reconcile(receipts_dir, periods, skip_unlisted_periods, output, output_format):
    """Compare received rewards of titan nodes with the farming policy 2 rewards."""
    receipts_dir = receipts_dir or Config.RECEIPTS_DIR
    periods = _resolve_periods(periods)

    try:
        report = run_reconciliation(receipts_dir, periods, skip_unlisted=skip_unlisted_periods)
    except ReconciliationError as e:
        err_console.print(f"[red]❌ Reconciliation failed: {e}[/red]")
        sys.exit(1)

    reporter = ReconciliationReporter(report.periods)
    if output_format == "rich":
        reporter.display(report, console)
    elif output:
        with open(output, "w", encoding="utf-8", newline="") as handle:
            reporter.render_csv(report, handle)
        err_console.print(f"✅ Wrote {len(report.rows)} rows to {output}")
    else:
        reporter.render_csv(report, click.get_text_stream("stdout"))


@cli.command()
@click.option("--receipts-dir", type=click.Path(file_okay=False), default=None,
              help="Directory with one folder of receipts per period")
@click.option("--periods", default=None, help="Comma separated period identifiers")
@click.option("--skip-unlisted-periods", is_flag=True,
              help="Ignore period directories that are not in the period list")
def check(receipts_dir, periods, skip_unlisted_periods):
    """Validate every receipt without building a report."""
    receipts_dir = receipts_dir or Config.RECEIPTS_DIR
    period_set = PeriodSet(_resolve_periods(periods))

    per_period = Counter()
    zero_price = Counter()
    seen = set()
    try:
        for period, receipt in iter_receipts(receipts_dir, period_set, skip_unlisted_periods):
            key = (receipt.node_id, period)
            if key in seen:
                raise DuplicateReceiptError(receipt.node_id, period)
            seen.add(key)
            per_period[period] += 1
            if receipt.tft_connection_price == 0:
                zero_price[period] += 1
    except ReconciliationError as e:
        err_console.print(f"[red]❌ Invalid receipts: {e}[/red]")
        sys.exit(1)

    table = Table(title="Receipts", show_header=True)
    table.add_column("Period", style="cyan")
    table.add_column("Receipts", justify="right")
    table.add_column("Zero price", justify="right", style="red")
    for period in period_set:
        table.add_row(period, str(per_period[period]), str(zero_price[period]))
    console.print(table)

    nodes = len({node_id for node_id, _ in seen})
    console.print(f"Total receipts: {sum(per_period.values())} from {nodes} nodes")
    if zero_price:
        console.print("[yellow]Receipts with a zero connection price cannot be reconciled[/yellow]")
        sys.exit(1)
    console.print("[bold green]All receipts valid.[/bold green]")


if __name__ == "__main__":
    cli()
