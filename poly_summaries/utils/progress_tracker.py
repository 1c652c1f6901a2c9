"""
Progress Tracker Module

Wraps rich library for a progress bar over the professors selected for a run.

Example Usage:
    from poly_summaries.utils.progress_tracker import ProgressTracker

    tracker = ProgressTracker()
    tracker.start_phase("Generating summaries (batch)", total_items=400)
    tracker.increment()
    tracker.complete_phase()
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressTracker:
    """Manages a single rich progress bar."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize ProgressTracker.

        Args:
            console: Console to render on (defaults to a new stderr console)
        """
        self.console = console or Console(stderr=True)
        self.progress: Optional[Progress] = None
        self.task_id: Optional[TaskID] = None
        self.phase_name: str = ""
        self.total_items: int = 0
        self.completed_items: int = 0

    def start_phase(self, phase_name: str, total_items: int) -> None:
        """
        Initialize progress bar for a new phase.

        Args:
            phase_name: Description shown next to the bar
            total_items: Total number of items to process
        """
        self.phase_name = phase_name
        self.total_items = total_items
        self.completed_items = 0

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("({task.completed}/{task.total})"),
            TimeElapsedColumn(),
            console=self.console,
        )
        self.progress.start()
        self.task_id = self.progress.add_task(description=phase_name, total=total_items)

    def increment(self, amount: int = 1) -> None:
        """Advance progress by a relative amount."""
        if self.progress is None or self.task_id is None:
            return

        self.completed_items += amount
        self.progress.update(self.task_id, advance=amount)

    def complete_phase(self) -> None:
        """Stop the progress bar and print a one-line summary."""
        if self.progress is None or self.task_id is None:
            return

        if self.completed_items < self.total_items:
            self.progress.update(self.task_id, completed=self.total_items)

        self.progress.stop()
        self.console.print(
            f"[bold green]{self.phase_name} complete:[/bold green] "
            f"{self.total_items} items processed"
        )

        self.progress = None
        self.task_id = None
        self.phase_name = ""
        self.total_items = 0
        self.completed_items = 0

    def is_active(self) -> bool:
        """True while a progress bar is running."""
        return self.progress is not None and self.task_id is not None
