"""
Summary Coordinator Module

Drives one run of summary generation over the aggregated professor list:
selects the range for the run mode, skips or regenerates each professor,
paces API calls, then writes results, cursor and run history once at the end.
"""

import asyncio
import uuid
from typing import Awaitable, Callable, Optional, Protocol

from poly_summaries.models.config import RunMode, SystemParams
from poly_summaries.models.professor import ProfessorRecord
from poly_summaries.models.run_report import RunReport
from poly_summaries.utils.llm_helpers import is_fallback
from poly_summaries.utils.logger import get_logger
from poly_summaries.utils.progress_tracker import ProgressTracker
from poly_summaries.utils.state_store import StateStore


class SummaryGenerator(Protocol):
    """What the coordinator needs from a summary client."""

    def will_call_api(self, record: ProfessorRecord) -> bool: ...

    async def summarize(self, record: ProfessorRecord) -> str: ...


def select_range(
    mode: RunMode, cursor: int, batch_size: int, total: int
) -> tuple[int, int]:
    """
    Compute the [start, end) slice of the professor list for this run.

    Example:
        >>> select_range(RunMode.BATCH, cursor=4, batch_size=3, total=6)
        (4, 6)
        >>> select_range(RunMode.FULL, cursor=4, batch_size=3, total=6)
        (0, 6)
    """
    if mode is RunMode.FULL:
        return 0, total
    start = min(cursor, total)
    return start, min(start + batch_size, total)


def next_cursor(mode: RunMode, end_index: int, total: int) -> int:
    """Cursor for the next run; wraps to 0 once the list is exhausted."""
    if mode is RunMode.FULL or end_index >= total:
        return 0
    return end_index


class SummaryCoordinator:
    """
    Resumable batch controller for professor summaries.

    Dependencies are injected so tests can swap in fakes for the summary
    client, the state store and the sleep function.
    """

    def __init__(
        self,
        params: SystemParams,
        summary_client: SummaryGenerator,
        state_store: StateStore,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        progress_tracker: Optional[ProgressTracker] = None,
        correlation_id: Optional[str] = None,
    ):
        """
        Initialize SummaryCoordinator.

        Args:
            params: Validated system parameters
            summary_client: Object with will_call_api() and async summarize()
            state_store: Persistence for results, cursor and history
            sleep: Coroutine used for the inter-request delay
            progress_tracker: Optional rich progress display
            correlation_id: Correlation ID for logging (auto-generated if None)
        """
        self.params = params
        self.summary_client = summary_client
        self.state_store = state_store
        self.sleep = sleep
        self.progress_tracker = progress_tracker

        if correlation_id is None:
            correlation_id = str(uuid.uuid4())
        self.correlation_id = correlation_id
        self.logger = get_logger(
            correlation_id=correlation_id,
            phase="summaries",
            component="summary_coordinator",
        )

    async def run(self, records: list[ProfessorRecord], mode: RunMode) -> RunReport:
        """
        Process one batch (or the whole list) and persist the outcome.

        Args:
            records: Aggregated professors in stable order
            mode: Run mode, fixed for the whole run

        Returns:
            RunReport describing what was processed

        Raises:
            IOError: If results, cursor or history cannot be written
        """
        total = len(records)
        existing = self.state_store.load_results()
        cursor = self.state_store.load_cursor()
        batch_size = self.params.batch_config.batch_size

        start, end = select_range(mode, cursor, batch_size, total)
        batch = records[start:end]
        report = RunReport(
            mode=mode, total_professors=total, start_index=start, end_index=end
        )

        self.logger.info(
            f"Processing professors {start + 1}-{end} of {total}",
            mode=mode.value,
            cursor=cursor,
            batch_size=batch_size,
            existing_summaries=len(existing),
        )

        results = dict(existing)
        await self._process_batch(batch, mode, results, report)

        report.next_index = next_cursor(mode, end, total)
        report.completed_cycle = mode is RunMode.BATCH and report.next_index == 0

        # Single write-back point; nothing is persisted mid-batch
        self.state_store.save_results(results)
        self.state_store.save_cursor(report.next_index)
        self.state_store.append_history(report)

        if report.completed_cycle:
            self.logger.info("All professors processed, cursor wrapped to 0")
        else:
            self.logger.info(
                "Progress saved", next_index=report.next_index, mode=mode.value
            )

        self.logger.info(
            "Run complete",
            processed=len(report.processed),
            skipped=report.skipped,
            generated=report.generated,
            fallbacks=report.fallbacks,
            retained=report.retained,
            api_calls=report.api_calls,
            total_summaries=len(results),
        )
        return report

    async def _process_batch(
        self,
        batch: list[ProfessorRecord],
        mode: RunMode,
        results: dict[str, str],
        report: RunReport,
    ) -> None:
        """Summarize each record in order, updating results and report in place."""
        if self.progress_tracker is not None:
            self.progress_tracker.start_phase(
                f"Generating summaries ({mode.value})", total_items=len(batch)
            )

        delay = self.params.retry.request_delay

        try:
            for record in batch:
                prior = results.get(record.name)

                if mode is RunMode.BATCH and not is_fallback(prior):
                    self.logger.debug(
                        "Skipping professor, already processed",
                        professor_name=record.name,
                    )
                    report.skipped += 1
                    self._advance_progress()
                    continue

                if self.summary_client.will_call_api(record):
                    if report.api_calls > 0 and delay > 0:
                        await self.sleep(delay)
                    report.api_calls += 1

                self.logger.info("Generating summary", professor_name=record.name)
                summary = await self.summary_client.summarize(record)
                report.processed.append(record.name)

                if is_fallback(summary):
                    report.fallbacks += 1
                    if prior is not None and not is_fallback(prior):
                        self.logger.warning(
                            "Regeneration failed, keeping previous summary",
                            professor_name=record.name,
                        )
                        report.retained += 1
                        self._advance_progress()
                        continue
                else:
                    report.generated += 1

                results[record.name] = summary
                self._advance_progress()
        finally:
            if self.progress_tracker is not None:
                self.progress_tracker.complete_phase()

    def _advance_progress(self) -> None:
        if self.progress_tracker is not None:
            self.progress_tracker.increment()
