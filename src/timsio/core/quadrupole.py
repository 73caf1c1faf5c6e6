"""
Quadrupole isolation settings per DIA window group.

Each window group cycles through several sub-windows, one per scan range.
QuadrupoleSettings stores them as five parallel lists where position ``i``
across all lists describes one sub-window.

Window groups are numbered from 1 in the TDF store and kept in 0-based lists
internally; the two helpers below are the only place that shift happens.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np


def window_group_to_position(window_group: int) -> int:
    """List position of a 1-based window group id."""
    if window_group < 1:
        raise ValueError(f"window_group must be >= 1, got {window_group}")
    return int(window_group) - 1


def position_to_window_group(position: int) -> int:
    """1-based window group id of a list position."""
    return int(position) + 1


@dataclass(slots=True)
class QuadrupoleSettings:
    """
    Isolation sub-windows of one window group (or of one frame after expansion).

    Attributes:
        index: Window group id (1-based), or frame id for expanded settings.
        scan_starts: First scan of each sub-window.
        scan_ends: Last scan of each sub-window.
        isolation_mz: Isolation center m/z of each sub-window.
        isolation_width: Isolation width (Da) of each sub-window.
        collision_energy: Collision energy (eV) of each sub-window.
    """
    index: int = 0
    scan_starts: list[int] = field(default_factory=list)
    scan_ends: list[int] = field(default_factory=list)
    isolation_mz: list[float] = field(default_factory=list)
    isolation_width: list[float] = field(default_factory=list)
    collision_energy: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate that all sub-window lists have the same length."""
        lengths = {
            len(self.scan_starts),
            len(self.scan_ends),
            len(self.isolation_mz),
            len(self.isolation_width),
            len(self.collision_energy),
        }
        if len(lengths) != 1:
            raise ValueError(
                f"Sub-window lists of window group {self.index} differ in length: "
                f"{sorted(lengths)}"
            )

    def append(
        self,
        scan_start: int,
        scan_end: int,
        isolation_mz: float,
        isolation_width: float,
        collision_energy: float,
    ) -> None:
        """Add one sub-window to all five lists."""
        self.scan_starts.append(int(scan_start))
        self.scan_ends.append(int(scan_end))
        self.isolation_mz.append(float(isolation_mz))
        self.isolation_width.append(float(isolation_width))
        self.collision_energy.append(float(collision_energy))

    def sorted_by_scan_start(self) -> 'QuadrupoleSettings':
        """
        Return a copy with all lists permuted by ascending scan start.

        Ties keep their original order.
        """
        order = np.argsort(np.asarray(self.scan_starts), kind='stable')
        return QuadrupoleSettings(
            index=self.index,
            scan_starts=[self.scan_starts[i] for i in order],
            scan_ends=[self.scan_ends[i] for i in order],
            isolation_mz=[self.isolation_mz[i] for i in order],
            isolation_width=[self.isolation_width[i] for i in order],
            collision_energy=[self.collision_energy[i] for i in order],
        )

    @property
    def scan_range(self) -> tuple[int, int]:
        """
        (min scan start, max scan end) over all sub-windows.

        Raises:
            ValueError: If there are no sub-windows.
        """
        if not self.scan_starts:
            raise ValueError(f"Window group {self.index} has no sub-windows")
        return min(self.scan_starts), max(self.scan_ends)

    def sub_windows(self) -> Iterator[tuple[int, int, float, float, float]]:
        """Yield (scan_start, scan_end, isolation_mz, isolation_width, collision_energy)."""
        return zip(
            self.scan_starts,
            self.scan_ends,
            self.isolation_mz,
            self.isolation_width,
            self.collision_energy,
        )

    def __len__(self) -> int:
        """Number of sub-windows."""
        return len(self.isolation_mz)
