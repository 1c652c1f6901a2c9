"""
State Store Module

Reads and writes the persisted summary results, the batch cursor and the
append-only run history. Reads are permissive: a missing or corrupt file
yields an empty default instead of an error.

Files are read once at run start and written once at run end. Running two
instances against the same output directory at the same time is not supported.

Example Usage:
    from poly_summaries.utils.state_store import StateStore

    store = StateStore(output_dir="summaries")
    results = store.load_results()
    cursor = store.load_cursor()

    ...

    store.save_results(results)
    store.save_cursor(next_index)
    store.append_history(report)
"""

import json
from pathlib import Path
from typing import Any

import jsonlines
import structlog
from pydantic import BaseModel

from poly_summaries.models.config import StorageConfig

logger = structlog.get_logger(__name__)

CURSOR_KEY = "lastIndex"


class StateStore:
    """Filesystem-backed JSON persistence for results and cursor state."""

    def __init__(
        self,
        output_dir: str = "summaries",
        results_file: str = "ai_summaries.json",
        state_file: str = "state.json",
        history_file: str = "run_history.jsonl",
    ):
        """
        Initialize StateStore. Nothing is created on disk until the first save.

        Args:
            output_dir: Directory holding all state files (default: "summaries")
            results_file: File name of the name -> summary map
            state_file: File name of the cursor state
            history_file: File name of the JSONL run history
        """
        self.output_dir = Path(output_dir)
        self.results_path = self.output_dir / results_file
        self.state_path = self.output_dir / state_file
        self.history_path = self.output_dir / history_file

    @classmethod
    def from_config(cls, storage: StorageConfig) -> "StateStore":
        """Build a StateStore from the storage section of SystemParams."""
        return cls(
            output_dir=storage.output_dir,
            results_file=storage.results_file,
            state_file=storage.state_file,
            history_file=storage.history_file,
        )

    def _read_json(self, path: Path) -> Any:
        """Read JSON from path, returning None when absent or unreadable."""
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning("Corrupt state file ignored", path=str(path), error=str(e))
            return None

    def _write_json(self, path: Path, data: Any) -> None:
        """Overwrite path with pretty-printed JSON."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise IOError(f"Failed to write {path}: {e}") from e

    def load_results(self) -> dict[str, str]:
        """
        Load the persisted name -> summary map.

        Returns:
            Mapping of professor name to summary text. Empty if the file is
            absent, corrupt or not a JSON object. Non-string values are dropped.
        """
        data = self._read_json(self.results_path)
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(
                    "Results file is not a JSON object, starting empty",
                    path=str(self.results_path),
                )
            return {}

        results = {
            str(name): summary
            for name, summary in data.items()
            if isinstance(summary, str)
        }
        if len(results) != len(data):
            logger.warning(
                "Dropped non-string summaries",
                dropped=len(data) - len(results),
            )
        return results

    def save_results(self, results: dict[str, str]) -> None:
        """
        Overwrite the results file.

        Raises:
            IOError: If the file cannot be written
        """
        self._write_json(self.results_path, results)
        logger.info(
            "Saved summaries", path=str(self.results_path), total_summaries=len(results)
        )

    def load_cursor(self) -> int:
        """
        Load the next start offset for bounded batches.

        Returns:
            Stored offset, or 0 if absent, corrupt, negative or not an integer
        """
        data = self._read_json(self.state_path)
        if not isinstance(data, dict):
            return 0

        value = data.get(CURSOR_KEY, 0)
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            logger.warning(
                "Invalid cursor value, resetting to 0",
                path=str(self.state_path),
                value=value,
            )
            return 0
        return value

    def save_cursor(self, next_index: int) -> None:
        """
        Overwrite the cursor state file.

        Raises:
            IOError: If the file cannot be written
        """
        self._write_json(self.state_path, {CURSOR_KEY: next_index})
        logger.info("Saved cursor state", path=str(self.state_path), next_index=next_index)

    def append_history(self, report: BaseModel) -> None:
        """
        Append one run report to the JSONL history file.

        Raises:
            IOError: If the history file cannot be written
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        try:
            with jsonlines.open(self.history_path, mode="a") as writer:
                writer.write(report.model_dump(mode="json"))
        except OSError as e:
            raise IOError(f"Failed to append run history {self.history_path}: {e}") from e

    def load_history(self) -> list[dict]:
        """
        Load all run reports, oldest first.

        Returns:
            List of report dicts; empty if the history file does not exist

        Raises:
            IOError: If the history file is corrupted
        """
        if not self.history_path.exists():
            return []

        try:
            with jsonlines.open(self.history_path) as reader:
                return list(reader)
        except jsonlines.InvalidLineError as e:
            raise IOError(f"Corrupted run history {self.history_path}: {e}") from e
