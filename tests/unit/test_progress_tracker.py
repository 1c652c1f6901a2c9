"""
Unit tests for progress_tracker module.
"""

from io import StringIO
from unittest.mock import MagicMock, patch

from rich.console import Console

from poly_summaries.utils.progress_tracker import ProgressTracker


def quiet_console():
    return Console(file=StringIO(), force_terminal=False)


class TestProgressTracker:
    """Test cases for ProgressTracker class."""

    def test_initialization(self):
        """Test that ProgressTracker initializes correctly."""
        # Arrange & Act
        tracker = ProgressTracker()

        # Assert
        assert tracker.progress is None
        assert tracker.task_id is None
        assert tracker.phase_name == ""
        assert tracker.total_items == 0
        assert tracker.completed_items == 0

    @patch("poly_summaries.utils.progress_tracker.Progress")
    def test_start_phase_creates_progress_bar(self, mock_progress_class):
        """Test that start_phase creates progress bar."""
        # Arrange
        mock_progress_instance = MagicMock()
        mock_progress_class.return_value = mock_progress_instance
        mock_progress_instance.add_task.return_value = 123

        tracker = ProgressTracker(console=quiet_console())

        # Act
        tracker.start_phase("Generating summaries (batch)", total_items=400)

        # Assert
        assert tracker.phase_name == "Generating summaries (batch)"
        assert tracker.total_items == 400
        assert tracker.completed_items == 0
        mock_progress_instance.start.assert_called_once()
        mock_progress_instance.add_task.assert_called_once_with(
            description="Generating summaries (batch)", total=400
        )

    @patch("poly_summaries.utils.progress_tracker.Progress")
    def test_increment_adds_to_progress(self, mock_progress_class):
        """Test that increment advances the bar."""
        mock_progress_instance = MagicMock()
        mock_progress_class.return_value = mock_progress_instance
        mock_progress_instance.add_task.return_value = 123

        tracker = ProgressTracker(console=quiet_console())
        tracker.start_phase("Phase", total_items=10)

        tracker.increment()
        tracker.increment(amount=4)

        assert tracker.completed_items == 5
        mock_progress_instance.update.assert_called_with(123, advance=4)

    @patch("poly_summaries.utils.progress_tracker.Progress")
    def test_complete_phase_stops_progress(self, mock_progress_class):
        """Test that complete_phase fills the bar and stops it."""
        # Arrange
        mock_progress_instance = MagicMock()
        mock_progress_class.return_value = mock_progress_instance
        mock_progress_instance.add_task.return_value = 123

        tracker = ProgressTracker(console=quiet_console())
        tracker.start_phase("Phase", total_items=10)
        tracker.increment(amount=3)

        # Act
        tracker.complete_phase()

        # Assert
        mock_progress_instance.update.assert_called_with(123, completed=10)
        mock_progress_instance.stop.assert_called_once()
        assert not tracker.is_active()
        assert tracker.total_items == 0

    def test_is_active_lifecycle(self):
        """Test is_active with a real progress bar on a quiet console."""
        tracker = ProgressTracker(console=quiet_console())
        assert not tracker.is_active()

        tracker.start_phase("Phase", total_items=2)
        assert tracker.is_active()

        tracker.complete_phase()
        assert not tracker.is_active()

    def test_increment_does_nothing_when_not_active(self):
        tracker = ProgressTracker(console=quiet_console())

        tracker.increment()
        tracker.complete_phase()

        assert tracker.completed_items == 0
