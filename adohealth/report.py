"""Report orchestrator: fetch PRs and threads, compute one row per PR.

Uses trio for concurrent thread fetches; rows come out in fetch order.
"""

from __future__ import annotations

import logging
import signal
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import trio
from rich.console import Console
from rich.live import Live
from rich.table import Table

from .ado_client import AzureDevOpsClient
from .aggregator import build_row, calculate_hours_to_merge
from .classifier import count_human_comments, find_first_human_response
from .config import HealthConfig
from .errors import HealthReportError, UpstreamError
from .export import METRIC_DESCRIPTIONS, write_rows
from .extractors.prs import extract_pr
from .extractors.threads import extract_thread
from .models import NOT_AVAILABLE, CommentThread, HealthReportRow, PullRequest

logger = logging.getLogger(__name__)

PR_QUEUE_SIZE = 50  # Buffer size for PR queue


class ReportState(Enum):
    RUNNING = "running"
    INTERRUPTED = "interrupted"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class ReportStats:
    """Live report statistics."""
    total_prs: int = 0
    processed_prs: int = 0
    skipped_prs: int = 0  # No PR id, nothing to report
    out_of_range_prs: int = 0  # Created outside start/end date

    completed_prs: int = 0
    human_comments: int = 0
    with_reviewer: int = 0

    api_requests: int = 0
    last_pr: int = 0
    last_error: str = ""
    state: ReportState = ReportState.RUNNING


def compute_row(pr: PullRequest, threads: list[CommentThread]) -> HealthReportRow:
    """Run the classifier and aggregator for one PR."""
    human_comment_count = count_human_comments(threads)
    response = find_first_human_response(pr, threads)
    hours_to_merge = calculate_hours_to_merge(pr)
    return build_row(pr, human_comment_count, response, hours_to_merge)


class HealthReporter:
    """Builds report rows for every PR of a repository."""

    def __init__(
        self,
        client: AzureDevOpsClient,
        config: HealthConfig,
        console: Console,
        handle_signals: bool = True,
    ):
        self.client = client
        self.config = config
        self.console = console
        self.handle_signals = handle_signals

        # Keyed by fetch index so output order doesn't depend on worker timing
        self.rows: dict[int, HealthReportRow] = {}
        self.stats = ReportStats()

        self._stop_requested = False
        self._failure: HealthReportError | None = None
        self._nursery: trio.Nursery | None = None

    def _fail(self, error: HealthReportError) -> None:
        """Record the first failure and cancel everything else."""
        if self._failure is None:
            self._failure = error
            self.stats.last_error = str(error)
            logger.error(f"Aborting report: {error}")
        self._stop_requested = True
        self.stats.state = ReportState.ERROR
        if self._nursery is not None:
            self._nursery.cancel_scope.cancel()

    async def _signal_watcher(self, nursery: trio.Nursery) -> None:
        """Watch for interrupt signals and cancel the nursery gracefully."""
        with trio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signal_aiter:
            async for sig in signal_aiter:
                self._stop_requested = True
                self.stats.state = ReportState.INTERRUPTED
                logger.info(f"Signal {sig} received, stopping...")
                nursery.cancel_scope.cancel()
                break

    async def fetch_row(self, pr: PullRequest) -> HealthReportRow:
        """Fetch threads for one PR and compute its row."""
        threads_data = await self.client.get_threads(self.config.repo_id, pr.pr_id)
        threads = [extract_thread(thread_data) for thread_data in threads_data]
        return compute_row(pr, threads)

    def record_row(self, index: int, row: HealthReportRow) -> None:
        """Store a finished row and update stats."""
        self.rows[index] = row
        self.stats.processed_prs += 1
        self.stats.human_comments += row.human_comment_count
        if row.hours_to_merge != NOT_AVAILABLE:
            self.stats.completed_prs += 1
        if row.lead_reviewer != NOT_AVAILABLE:
            self.stats.with_reviewer += 1
        self.stats.last_pr = row.pr_id
        self.stats.api_requests = self.client.request_count

    async def _process_single_pr(self, index: int, pr: PullRequest) -> None:
        """Process a single PR (called by worker tasks)."""
        if self._stop_requested:
            return

        try:
            row = await self.fetch_row(pr)
        except HealthReportError as e:
            self._fail(e)
            return
        except ValueError as e:
            self._fail(UpstreamError(f"Unexpected thread data for PR {pr.pr_id}: {e}"))
            return

        self.record_row(index, row)
        logger.debug(f"PR {pr.pr_id} processed")

    def in_date_range(self, pr: PullRequest) -> bool:
        """Check the creation date against the configured window.

        PRs without a creation date are kept.
        """
        created = pr.creation_date
        if created is None:
            return True
        if self.config.start_date and created < self.config.start_date:
            return False
        if self.config.end_date and created > self.config.end_date:
            return False
        return True

    async def _pr_producer(self, send_channel: trio.MemorySendChannel) -> None:
        """Page through PRs and queue them with their fetch index."""
        async with send_channel:
            index = 0
            try:
                async for pr_data in self.client.get_pull_requests(
                    self.config.repo_id,
                    page_size=self.config.page_size,
                    start_date=self.config.start_date,
                    end_date=self.config.end_date,
                    limit=self.config.limit,
                ):
                    if self._stop_requested:
                        break

                    pr = extract_pr(pr_data)
                    self.stats.total_prs += 1

                    if pr.pr_id is None:
                        self.stats.skipped_prs += 1
                        logger.debug("Skipping PR without id")
                        continue

                    if not self.in_date_range(pr):
                        self.stats.out_of_range_prs += 1
                        logger.debug(f"Skipping PR {pr.pr_id} created {pr.creation_date}, outside date range")
                        continue

                    await send_channel.send((index, pr))
                    index += 1
            except HealthReportError as e:
                self._fail(e)
            except ValueError as e:
                self._fail(UpstreamError(f"Unexpected pull request data: {e}"))

    async def _pr_worker(self, receive_channel: trio.MemoryReceiveChannel) -> None:
        """Worker that processes PRs from the queue.

        Concurrency is controlled by the number of workers, each worker
        processes one PR at a time.
        """
        async with receive_channel:
            async for index, pr in receive_channel:
                if self._stop_requested:
                    break
                await self._process_single_pr(index, pr)

    async def _pipeline(self, nursery: trio.Nursery) -> None:
        """Run producer and workers, then stop the helper tasks."""
        send_channel, receive_channel = trio.open_memory_channel[tuple[int, PullRequest]](PR_QUEUE_SIZE)

        async with trio.open_nursery() as pipeline:
            pipeline.start_soon(self._pr_producer, send_channel)
            for _ in range(self.config.concurrency):
                pipeline.start_soon(self._pr_worker, receive_channel.clone())
            # Workers have clones
            await receive_channel.aclose()

        nursery.cancel_scope.cancel()

    async def _dashboard_task(self, live: Live) -> None:
        """Update dashboard periodically."""
        while not self._stop_requested:
            await trio.sleep(0.5)
            live.update(self.build_dashboard())

    def build_dashboard(self) -> Table:
        """Build the live dashboard display."""
        table = Table(title="Azure DevOps PR Health", expand=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        state_color = {
            ReportState.RUNNING: "green",
            ReportState.INTERRUPTED: "yellow",
            ReportState.COMPLETED: "blue",
            ReportState.ERROR: "red",
        }
        state_str = f"[{state_color[self.stats.state]}]{self.stats.state.value}[/]"

        table.add_row(
            "State", state_str,
            "API Requests", str(self.stats.api_requests),
        )
        table.add_row(
            "PRs Fetched", str(self.stats.total_prs),
            "Processed", str(self.stats.processed_prs),
        )
        table.add_row(
            "Skipped (no id)", str(self.stats.skipped_prs),
            "Last PR", f"#{self.stats.last_pr}" if self.stats.last_pr else "-",
        )
        table.add_row(
            "Completed", str(self.stats.completed_prs),
            "With Reviewer", str(self.stats.with_reviewer),
        )
        table.add_row(
            "Human Comments", str(self.stats.human_comments),
            "Out of Range", str(self.stats.out_of_range_prs),
        )

        if self.stats.last_error:
            error = self.stats.last_error
            table.add_row(
                "[red]Error[/]",
                f"[red]{error[:80]}...[/]" if len(error) > 80 else f"[red]{error}[/]",
                "", "",
            )

        return table

    def rows_in_order(self) -> list[HealthReportRow]:
        """Rows sorted by the order PRs were fetched."""
        return [self.rows[index] for index in sorted(self.rows)]

    async def run(self) -> list[HealthReportRow] | None:
        """Build rows for every PR.

        Uses producer/consumer pattern:
        - Producer: pages through PRs and queues them
        - Workers: fetch threads and compute rows (config.concurrency at a time)

        Returns the rows in fetch order, or None if interrupted. Raises the
        first upstream failure; nothing is returned for a partial run.
        """
        start = self.config.start_date.date() if self.config.start_date else "beginning"
        end = self.config.end_date.date() if self.config.end_date else "now"
        logger.info("=" * 60)
        logger.info(f"Starting report for repo {self.config.repo_id}: {start} to {end}")
        logger.info(f"Concurrency: {self.config.concurrency}, Limit: {self.config.limit}")

        self.console.print(f"[bold]Fetching PRs for repo {self.config.repo_id} ({start} to {end})[/]")
        self.console.print(f"[dim]Concurrency: {self.config.concurrency} PRs[/]")

        with Live(self.build_dashboard(), console=self.console, refresh_per_second=2) as live:
            async with trio.open_nursery() as nursery:
                self._nursery = nursery
                if self.handle_signals:
                    nursery.start_soon(self._signal_watcher, nursery)
                nursery.start_soon(self._dashboard_task, live)
                nursery.start_soon(self._pipeline, nursery)

            self._nursery = None
            self.stats.api_requests = self.client.request_count
            if self._failure is None and self.stats.state == ReportState.RUNNING:
                self.stats.state = ReportState.COMPLETED
            live.update(self.build_dashboard())

        if self._failure is not None:
            raise self._failure

        if self.stats.state == ReportState.INTERRUPTED:
            logger.info(f"Report interrupted after {self.stats.processed_prs} PRs")
            self.console.print("\n[bold yellow]Report interrupted - nothing written[/]")
            return None

        logger.info(
            f"Report complete: {self.stats.processed_prs} processed, "
            f"{self.stats.skipped_prs} skipped, {self.stats.out_of_range_prs} out of range, "
            f"{self.stats.api_requests} API requests"
        )
        return self.rows_in_order()


def print_metric_notes(console: Console, columns: Iterable[str] | None = None) -> None:
    """Print what each exported column means."""
    console.print("\n[bold]Columns[/]")
    for column in columns or METRIC_DESCRIPTIONS:
        console.print(f"  [cyan]{column}[/]: {METRIC_DESCRIPTIONS[column]}")


async def main(config: HealthConfig, console: Console | None = None) -> list[HealthReportRow] | None:
    """Main entry point. Exports only after every PR succeeded."""
    console = console or Console()

    async with AzureDevOpsClient.from_config(config) as client:
        reporter = HealthReporter(client, config, console)
        rows = await reporter.run()

    if rows is None:
        return None

    write_rows(rows, config.output, config.format)

    console.print("\n[bold green]Report complete![/]")
    console.print(
        f"  PRs: {len(rows)} ({reporter.stats.skipped_prs} skipped without id, "
        f"{reporter.stats.out_of_range_prs} outside the date range)"
    )
    console.print(f"  API Requests: {reporter.stats.api_requests}")
    console.print(f"  Output: {config.output}")
    print_metric_notes(console)
    return rows
