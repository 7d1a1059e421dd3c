from __future__ import annotations

from unittest.mock import Mock, patch

from roster_import.services.progress import BatchProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True
    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestBatchProgress:
    """BatchProgress creates a tqdm bar only on a TTY."""

    def test_init_with_tty_enabled(self):
        with patch('roster_import.services.progress.is_tty_enabled', return_value=True), \
             patch('roster_import.services.progress.tqdm') as mock_tqdm:
            progress = BatchProgress(250)

            assert progress.enabled is True
            mock_tqdm.assert_called_once_with(
                total=250,
                desc="Saving students",
                unit="student",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('roster_import.services.progress.is_tty_enabled', return_value=False), \
             patch('roster_import.services.progress.tqdm') as mock_tqdm:
            progress = BatchProgress(250)

            assert progress.enabled is False
            assert progress.pbar is None
            mock_tqdm.assert_not_called()

    def test_advance_updates_bar(self):
        mock_pbar = Mock()
        with patch('roster_import.services.progress.is_tty_enabled', return_value=True), \
             patch('roster_import.services.progress.tqdm', return_value=mock_pbar):
            progress = BatchProgress(250)
            progress.advance(100)
            progress.advance(100)

        assert progress.batches_done == 2
        assert mock_pbar.update.call_count == 2
        mock_pbar.set_postfix.assert_called_with(batches=2)

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch('roster_import.services.progress.is_tty_enabled', return_value=True), \
             patch('roster_import.services.progress.tqdm', return_value=mock_pbar):
            with BatchProgress(10) as progress:
                progress.advance(10)

        mock_pbar.close.assert_called_once()
        assert progress.pbar is None

    def test_disabled_advance_counts_batches_only(self):
        with patch('roster_import.services.progress.is_tty_enabled', return_value=False):
            progress = BatchProgress(10)
            progress.advance(5)
            progress.close()
        assert progress.batches_done == 1
