"""
System resource and parallel execution utilities for timsio.

This module provides utilities for:
- Detecting logical and physical CPU counts
- Choosing a worker count from a parallelization mode
- Running an order-preserving parallel map over frame positions
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


class ParallelMode(Enum):
    """Parallelization intensity modes."""
    NONE = auto()      # Single-threaded
    LIGHT = auto()     # 25% of available resources
    HEAVY = auto()     # 75% of available resources
    MAX = auto()       # 100% of available resources (all cores)
    CUSTOM = auto()    # User-specified number of workers


@dataclass(frozen=True)
class SystemResources:
    """CPU counts used to size worker pools."""
    cpu_count: int
    cpu_count_physical: int

    def get_workers(self, mode: ParallelMode, custom_workers: Optional[int] = None) -> int:
        """
        Calculate number of workers based on parallel mode.

        Args:
            mode: Parallelization mode.
            custom_workers: Number of workers for CUSTOM mode.

        Returns:
            Number of worker threads to use.
        """
        if mode == ParallelMode.NONE:
            return 1
        elif mode == ParallelMode.LIGHT:
            return max(1, self.cpu_count_physical // 4)
        elif mode == ParallelMode.HEAVY:
            return max(1, int(self.cpu_count_physical * 0.75))
        elif mode == ParallelMode.MAX:
            return max(1, self.cpu_count)
        elif mode == ParallelMode.CUSTOM:
            if custom_workers is None:
                raise ValueError("custom_workers must be specified for CUSTOM mode")
            return max(1, min(custom_workers, self.cpu_count))
        else:
            return 1


def _count_physical_cores(cpuinfo: Path, fallback: int) -> int:
    """Count unique (physical id, core id) pairs in /proc/cpuinfo."""
    cores = set()
    current_physical = None
    with open(cpuinfo) as f:
        for line in f:
            if line.startswith('physical id'):
                current_physical = line.split(':')[1].strip()
            elif line.startswith('core id') and current_physical is not None:
                cores.add((current_physical, line.split(':')[1].strip()))
    return len(cores) if cores else fallback


def get_system_resources() -> SystemResources:
    """
    Detect available system resources.

    Returns:
        SystemResources with logical and physical CPU counts.
    """
    cpu_count = os.cpu_count() or 1

    cpu_count_physical = cpu_count
    cpuinfo = Path('/proc/cpuinfo')
    if cpuinfo.exists():
        try:
            cpu_count_physical = _count_physical_cores(cpuinfo, cpu_count)
        except OSError as e:
            logger.debug(f"Could not read {cpuinfo}: {e}")

    return SystemResources(
        cpu_count=cpu_count,
        cpu_count_physical=cpu_count_physical,
    )


def parallel_map(
    func: Callable[[T], R],
    items: Sequence[T],
    n_workers: int = 1,
) -> list[R]:
    """
    Apply ``func`` to every item, distributing the calls over a thread pool.

    Completion order is unspecified, but the returned list is in input order:
    ``result[i] == func(items[i])``. An exception raised by any call is
    re-raised here.

    Args:
        func: Function to apply. Must not mutate shared state.
        items: Inputs, typically frame positions.
        n_workers: Number of worker threads. 1 runs sequentially.

    Returns:
        List of results in input order.
    """
    if n_workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]

    results: list[Optional[R]] = [None] * len(items)
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        futures = {
            executor.submit(func, item): position
            for position, item in enumerate(items)
        }
        for future in as_completed(futures):
            results[futures[future]] = future.result()
    return results  # type: ignore[return-value]
