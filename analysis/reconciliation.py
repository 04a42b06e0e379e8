"""
Reconciliation of titan node payouts against the reference schedule.

Walks every node timeline, keeps the nodes that were titan in at least one
period, and renders their expected vs. received rewards as a table.
"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO, Union

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from reconciler.aggregator import aggregate_receipts
from reconciler.receipt import ResourceRewards
from reconciler.receipt_source import iter_receipts
from reconciler.reward_calculator import TITAN_SCHEDULE
from reconciler.tiers import is_titan
from reconciler.timeline import NodeTimeline, PeriodSet
from reconciler.utils import format_diff_tft, format_percentage, format_tft

logger = logging.getLogger(__name__)
console = Console()


@dataclass(frozen=True)
class PeriodRow:
    """Reported values of one node in one period."""

    titan: bool
    uptime_percentage: int
    expected_payout: int
    actual_payout: int

    def cells(self) -> List[str]:
        return [
            "true" if self.titan else "false",
            format_percentage(self.uptime_percentage),
            format_tft(self.expected_payout),
            format_tft(self.actual_payout),
        ]


@dataclass(frozen=True)
class NodeRow:
    """One report line: a titan node across all periods."""

    node_id: int
    periods: List[PeriodRow]
    total_expected: int
    total_received: int

    @property
    def difference(self) -> int:
        return self.total_expected - self.total_received

    def cells(self) -> List[str]:
        row = [str(self.node_id)]
        for period in self.periods:
            row.extend(period.cells())
        row.extend(
            [
                format_tft(self.total_expected),
                format_tft(self.total_received),
                format_diff_tft(self.difference),
            ]
        )
        return row


@dataclass
class ReconciliationSummary:
    """Totals across all audited nodes."""

    node_count: int = 0
    total_expected: int = 0
    total_received: int = 0
    underpaid_nodes: int = 0
    overpaid_nodes: int = 0

    @property
    def difference(self) -> int:
        return self.total_expected - self.total_received

    def add(self, row: NodeRow) -> None:
        self.node_count += 1
        self.total_expected += row.total_expected
        self.total_received += row.total_received
        if row.difference > 0:
            self.underpaid_nodes += 1
        elif row.difference < 0:
            self.overpaid_nodes += 1


@dataclass
class ReconciliationReport:
    """Complete report, built in memory before anything is written."""

    periods: PeriodSet
    rows: List[NodeRow] = field(default_factory=list)
    summary: ReconciliationSummary = field(default_factory=ReconciliationSummary)

    def header(self) -> List[str]:
        header = ["node_id"]
        for period in self.periods:
            header.extend(
                [
                    f"p{period} titan",
                    f"p{period} uptime",
                    f"p{period} expected TFT",
                    f"p{period} received TFT",
                ]
            )
        header.extend(["Total expected TFT", "Total received TFT", "Difference (to send)"])
        return header


class ReconciliationReporter:
    """Builds and renders reconciliation reports."""

    def __init__(self, periods: Union[PeriodSet, Sequence[str]]):
        """
        Initialize reporter.

        Args:
            periods: Recognized periods, in report column order
        """
        self.periods = periods if isinstance(periods, PeriodSet) else PeriodSet(periods)

    def node_row(self, timeline: NodeTimeline) -> NodeRow:
        """Report line of a single node, regardless of its tier."""
        return NodeRow(
            node_id=timeline.node_id,
            periods=[
                PeriodRow(
                    titan=is_titan(result),
                    uptime_percentage=result.uptime_percentage,
                    expected_payout=result.expected_payout,
                    actual_payout=result.actual_payout,
                )
                for result in timeline
            ],
            total_expected=timeline.total_expected,
            total_received=timeline.total_received,
        )

    def build_report(self, timelines: Dict[int, NodeTimeline]) -> ReconciliationReport:
        """
        Build the report over all node timelines.

        Nodes never classified titan are left out. Rows are ordered by
        ascending node id.

        Args:
            timelines: node_id -> NodeTimeline

        Returns:
            ReconciliationReport
        """
        report = ReconciliationReport(periods=self.periods)
        for node_id in sorted(timelines):
            timeline = timelines[node_id]
            if not is_titan(timeline):
                continue
            row = self.node_row(timeline)
            report.rows.append(row)
            report.summary.add(row)

        logger.info(
            f"Audited {report.summary.node_count} titan nodes out of {len(timelines)} nodes"
        )
        return report

    def render_csv(self, report: ReconciliationReport, stream: TextIO) -> None:
        """Write the report as comma separated values."""
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(report.header())
        for row in report.rows:
            writer.writerow(row.cells())

    def display(self, report: ReconciliationReport, out: Optional[Console] = None) -> None:
        """
        Display the report as a rich table with a summary panel.

        Args:
            report: Report to display
            out: Console to print to, module console by default
        """
        out = out or console
        if not report.rows:
            out.print("[yellow]No titan nodes found in the receipts[/yellow]")
            return

        table = Table(title="Titan Payout Reconciliation", show_header=True)
        table.add_column("Node", style="cyan")
        for period in report.periods:
            table.add_column(f"p{period}", justify="right")
        table.add_column("Expected TFT", justify="right", style="green")
        table.add_column("Received TFT", justify="right", style="yellow")
        table.add_column("Difference", justify="right", style="magenta")

        for row in report.rows:
            cells = [str(row.node_id)]
            for period in row.periods:
                marker = "[bold]T[/bold]" if period.titan else "-"
                cells.append(
                    f"{marker} {format_percentage(period.uptime_percentage)}\n"
                    f"{format_tft(period.expected_payout)}\n"
                    f"{format_tft(period.actual_payout)}"
                )
            difference = format_diff_tft(row.difference)
            style = "red" if row.difference > 0 else "green"
            cells.extend(
                [
                    format_tft(row.total_expected),
                    format_tft(row.total_received),
                    f"[{style}]{difference}[/{style}]",
                ]
            )
            table.add_row(*cells)

        out.print(table)

        summary = report.summary
        out.print(
            Panel.fit(
                f"Titan nodes audited: {summary.node_count}\n"
                f"Total expected: {format_tft(summary.total_expected)} TFT\n"
                f"Total received: {format_tft(summary.total_received)} TFT\n"
                f"Net difference (to send): {format_diff_tft(summary.difference)} TFT\n"
                f"Underpaid nodes: {summary.underpaid_nodes}  Overpaid nodes: {summary.overpaid_nodes}",
                title="Summary",
                border_style="cyan",
            )
        )


def run_reconciliation(
    receipts_dir: Union[str, Path],
    periods: Sequence[str],
    schedule: ResourceRewards = TITAN_SCHEDULE,
    skip_unlisted: bool = False,
) -> ReconciliationReport:
    """
    Load all receipts and build the reconciliation report.

    Args:
        receipts_dir: Root directory with one folder per period
        periods: Recognized periods
        schedule: Reference schedule for expected payouts
        skip_unlisted: Ignore period directories outside `periods`

    Returns:
        Complete ReconciliationReport
    """
    period_set = PeriodSet(periods)
    timelines = aggregate_receipts(
        iter_receipts(receipts_dir, period_set, skip_unlisted), period_set, schedule
    )
    return ReconciliationReporter(period_set).build_report(timelines)
