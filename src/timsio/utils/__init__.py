"""
Utility modules for timsio.

This module provides:
- System resource detection
- Parallelization helpers
"""

from .parallel import (
    ParallelMode,
    SystemResources,
    get_system_resources,
    parallel_map,
)

__all__ = [
    "ParallelMode",
    "SystemResources",
    "get_system_resources",
    "parallel_map",
]
