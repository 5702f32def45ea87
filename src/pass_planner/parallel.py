"""
Parallel pass prediction across observers.

Each scan is independent of every other, so predicting passes for many
observer locations is distributed over a process pool. Workers rebuild the
orbit from its TLE lines, since predictor objects are not shipped between
processes.
"""

from concurrent.futures import ProcessPoolExecutor, as_completed
from datetime import datetime
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging
import os

from .config import DEFAULT_SCAN_CONFIG, ScanConfig
from .observer import Observer
from .visibility import Pass

logger = logging.getLogger(__name__)


def get_optimal_workers(max_workers: Optional[int] = None, num_tasks: int = 0) -> int:
    """
    Determine number of worker processes.

    Args:
        max_workers: Maximum number of workers (None = auto-detect)
        num_tasks: Number of scans to run

    Returns:
        Worker count, never more than there are tasks
    """
    cpu_count = os.cpu_count() or 4

    workers = min(max_workers, cpu_count) if max_workers is not None else cpu_count
    if num_tasks > 0:
        workers = min(workers, num_tasks)
    return max(1, workers)


def _scan_observer_worker(
    observer: Observer,
    tle_lines: Sequence[str],
    start_time: datetime,
    config: ScanConfig,
) -> Tuple[Observer, List[Pass]]:
    """
    Worker function to compute passes for a single observer.

    Runs in a separate process, so the orbit is rebuilt here.
    """
    from pass_planner.orbit import SatelliteOrbit
    from pass_planner.planner import PassPlanner

    satellite = SatelliteOrbit(list(tle_lines))
    planner = PassPlanner(satellite, observer, config)
    return observer, planner.compute_passes(start_time)


def compute_passes_for_observers(
    tle_lines: Sequence[str],
    observers: Sequence[Observer],
    start_time: datetime,
    config: ScanConfig = DEFAULT_SCAN_CONFIG,
    max_workers: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> Dict[Observer, List[Pass]]:
    """
    Predict passes for several observers in parallel.

    Args:
        tle_lines: TLE lines of the satellite ([name, line1, line2] or [line1, line2])
        observers: Observer locations
        start_time: Window start (UTC)
        config: Scan configuration shared by all observers
        max_workers: Maximum worker processes (None = auto-detect)
        progress_callback: Optional callback(completed, total)

    Returns:
        Dictionary mapping each observer to its passes. Equal observers are
        scanned once and share one entry.

    Raises:
        Exception: Whatever a worker raised, e.g. ValueError for bad TLE data
    """
    unique = list(dict.fromkeys(observers))
    if not unique:
        return {}

    workers = get_optimal_workers(max_workers, len(unique))
    worker_func = partial(
        _scan_observer_worker,
        tle_lines=list(tle_lines),
        start_time=start_time,
        config=config,
    )

    logger.info(f"Computing passes for {len(unique)} observers using {workers} workers")

    results: Dict[Observer, List[Pass]] = {}
    completed = 0

    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(worker_func, observer): observer for observer in unique}

        for future in as_completed(futures):
            observer = futures[future]
            try:
                _, passes = future.result()
            except Exception as e:
                logger.error(f"Error computing passes for {observer.display_name}: {e}")
                raise

            results[observer] = passes
            completed += 1
            logger.debug(f"Completed {completed}/{len(unique)}: "
                         f"{observer.display_name} ({len(passes)} passes)")

            if progress_callback:
                progress_callback(completed, len(unique))

    total = sum(len(p) for p in results.values())
    logger.info(f"Parallel computation complete: {total} passes across {len(unique)} observers")

    # Input order, not completion order
    return {observer: results[observer] for observer in unique}
