"""
Tests for parallel pass prediction across observers.
"""

from concurrent.futures import Future
from datetime import datetime
from unittest.mock import patch

import pytest

from pass_planner.config import ScanConfig
from pass_planner.observer import Observer
from pass_planner.parallel import (
    _scan_observer_worker,
    compute_passes_for_observers,
    get_optimal_workers,
)


class InlineExecutor:
    """Runs submitted work in the calling process."""

    def __init__(self, max_workers=None) -> None:
        self.max_workers = max_workers

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        return None

    def submit(self, fn, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


@pytest.fixture
def observers():
    return [
        Observer(51.5074, -0.1278, name="London"),
        Observer(40.7128, -74.0060, name="New York"),
        Observer(-33.8688, 151.2093, name="Sydney"),
    ]


class TestGetOptimalWorkers:
    """Tests for get_optimal_workers function."""

    @patch("pass_planner.parallel.os.cpu_count", return_value=8)
    def test_auto_detect(self, mock_cpu) -> None:
        assert get_optimal_workers() == 8

    @patch("pass_planner.parallel.os.cpu_count", return_value=8)
    def test_capped_by_max_workers(self, mock_cpu) -> None:
        assert get_optimal_workers(max_workers=2) == 2

    @patch("pass_planner.parallel.os.cpu_count", return_value=8)
    def test_capped_by_tasks(self, mock_cpu) -> None:
        assert get_optimal_workers(num_tasks=3) == 3

    @patch("pass_planner.parallel.os.cpu_count", return_value=None)
    def test_unknown_cpu_count(self, mock_cpu) -> None:
        assert get_optimal_workers() == 4

    def test_at_least_one(self) -> None:
        assert get_optimal_workers(max_workers=0) == 1


class TestComputePassesForObservers:
    def test_empty_observers(self, sample_tle_lines) -> None:
        assert compute_passes_for_observers(sample_tle_lines, [], datetime(2021, 10, 2)) == {}

    @patch("pass_planner.parallel.ProcessPoolExecutor", InlineExecutor)
    @patch("pass_planner.parallel._scan_observer_worker")
    def test_results_in_input_order(self, mock_worker, sample_tle_lines, observers) -> None:
        mock_worker.side_effect = lambda observer, **kwargs: (observer, [observer.name])
        progress = []

        results = compute_passes_for_observers(
            sample_tle_lines,
            observers,
            datetime(2021, 10, 2),
            progress_callback=lambda done, total: progress.append((done, total)),
        )

        assert list(results) == observers
        assert results[observers[2]] == ["Sydney"]
        assert progress == [(1, 3), (2, 3), (3, 3)]

    @patch("pass_planner.parallel.ProcessPoolExecutor", InlineExecutor)
    @patch("pass_planner.parallel._scan_observer_worker")
    def test_shared_arguments(self, mock_worker, sample_tle_lines, observers) -> None:
        mock_worker.side_effect = lambda observer, **kwargs: (observer, [])
        config = ScanConfig(window_hours=1.0)
        start = datetime(2021, 10, 2)

        compute_passes_for_observers(sample_tle_lines, observers[:1], start, config)

        mock_worker.assert_called_once_with(
            observers[0], tle_lines=sample_tle_lines, start_time=start, config=config
        )

    @patch("pass_planner.parallel.ProcessPoolExecutor", InlineExecutor)
    @patch("pass_planner.parallel._scan_observer_worker")
    def test_duplicate_observers_scanned_once(self, mock_worker, sample_tle_lines, observers) -> None:
        mock_worker.side_effect = lambda observer, **kwargs: (observer, [observer.name])
        progress = []
        london_again = Observer(51.5074, -0.1278, name="London")

        results = compute_passes_for_observers(
            sample_tle_lines,
            [observers[0], observers[1], london_again],
            datetime(2021, 10, 2),
            progress_callback=lambda done, total: progress.append((done, total)),
        )

        assert list(results) == [observers[0], observers[1]]
        assert mock_worker.call_count == 2
        assert progress[-1] == (2, 2)

    @patch("pass_planner.parallel.ProcessPoolExecutor", InlineExecutor)
    def test_worker_error_propagates(self, observers) -> None:
        with pytest.raises(ValueError):
            compute_passes_for_observers(["bad", "tle"], observers, datetime(2021, 10, 2))


class TestWorker:
    def test_scans_one_observer(self, sample_tle_lines, sample_observer, base_datetime) -> None:
        observer, passes = _scan_observer_worker(
            sample_observer,
            sample_tle_lines,
            base_datetime,
            ScanConfig(window_hours=2.0, step_seconds=60.0),
        )

        assert observer == sample_observer
        assert isinstance(passes, list)


@pytest.mark.slow
class TestProcessPool:
    """Real worker processes."""

    def test_matches_serial_scan(self, sample_tle_lines, observers, base_datetime) -> None:
        config = ScanConfig(window_hours=6.0, step_seconds=60.0)

        results = compute_passes_for_observers(
            sample_tle_lines, observers, base_datetime, config, max_workers=2
        )

        for observer in observers:
            _, expected = _scan_observer_worker(observer, sample_tle_lines, base_datetime, config)
            assert results[observer] == expected
