"""Outcome of a single summary generation run."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from poly_summaries.models.config import RunMode


class RunReport(BaseModel):
    """Counters and cursor movement for one run.

    Appended to the run history file after results are written.
    """

    mode: RunMode
    total_professors: int = 0
    start_index: int = 0
    end_index: int = 0
    next_index: int = 0
    processed: list[str] = Field(default_factory=list)
    skipped: int = 0
    generated: int = 0
    fallbacks: int = 0
    retained: int = 0
    api_calls: int = 0
    completed_cycle: bool = False
    finished_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
