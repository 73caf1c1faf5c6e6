"""
Quadrupole isolation settings of DIA-PASEF runs.

Isolation sub-windows are read from DiaFrameMsMsWindows and grouped per
window group. For analysis they can be expanded per frame, either by
splitting each sub-window's scan range (QuadrupoleSplitting) or by splitting
the scan range of the whole window group and re-aggregating the sub-windows
that fall into each piece (WindowSplitting).

Expansion strategies, for a window with scan start 50 and end 500:

- NoExpansion: keep (50, 500).
- Even(n): n overlapping windows of two equal units each, the unit being
  (end - start) // (n + 1); Even(1) keeps (50, 500).
- Uniform(span, step): windows of ``span`` scans every ``step`` scans; the
  last window is cut at the end of the range.
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Optional, Union

from ..sql import SqlQuadSettings, SqlReader, SqlWindowGroup
from ...core.quadrupole import (
    QuadrupoleSettings,
    position_to_window_group,
    window_group_to_position,
)


logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NoExpansion:
    """Keep every scan range unchanged."""


@dataclass(frozen=True)
class Even:
    """Split into ``num_splits`` overlapping windows."""
    num_splits: int = 1

    def __post_init__(self) -> None:
        if self.num_splits < 1:
            raise ValueError(f"num_splits must be >= 1, got {self.num_splits}")


@dataclass(frozen=True)
class Uniform:
    """Windows of ``span`` scans, one every ``step`` scans."""
    span: int
    step: int

    def __post_init__(self) -> None:
        if self.span <= 0 or self.step <= 0:
            raise ValueError(f"span and step must be > 0, got ({self.span}, {self.step})")


QuadWindowExpansionStrategy = Union[NoExpansion, Even, Uniform]


class WindowOverlapMode(Enum):
    """
    Member test used when re-aggregating a window group.

    LEGACY skips a sub-window when ``swe <= gse or gss <= sws``, which only
    keeps sub-windows lying strictly inside the split range. STANDARD keeps
    every sub-window whose scan range overlaps the split range.
    """
    LEGACY = auto()
    STANDARD = auto()


@dataclass(frozen=True)
class QuadrupoleSplitting:
    """Split the scan range of each quadrupole sub-window."""
    strategy: QuadWindowExpansionStrategy = field(default_factory=lambda: Even(1))


@dataclass(frozen=True)
class WindowSplitting:
    """Split the scan range of each whole window group."""
    strategy: QuadWindowExpansionStrategy = field(default_factory=lambda: Even(1))
    overlap_mode: WindowOverlapMode = WindowOverlapMode.LEGACY


FrameWindowSplittingStrategy = Union[QuadrupoleSplitting, WindowSplitting]


def default_splitting_strategy() -> FrameWindowSplittingStrategy:
    return QuadrupoleSplitting(Even(1))


# -----------------------------------------------------------------------------
# Scan range splitting
# -----------------------------------------------------------------------------

def scan_range_subsplit(
    start: int,
    end: int,
    strategy: QuadWindowExpansionStrategy,
) -> list[tuple[int, int]]:
    """
    Split the scan range ``[start, end]`` according to a strategy.

    Every returned pair ``(s, e)`` satisfies ``start <= s < e <= end``.

    Raises:
        ValueError: If the strategy is too fine for the range (an Even unit
            or a NoExpansion range of zero scans).
    """
    if isinstance(strategy, NoExpansion):
        out = [(start, end)]
    elif isinstance(strategy, Even):
        width = (end - start) // (strategy.num_splits + 1)
        out = [
            (start + width * k, start + width * (k + 2))
            for k in range(strategy.num_splits)
        ]
    elif isinstance(strategy, Uniform):
        out = []
        curr_start = start
        curr_end = start + strategy.span
        while curr_end < end:
            out.append((curr_start, curr_end))
            curr_start += strategy.step
            curr_end += strategy.step
        if curr_start < end:
            out.append((curr_start, end))
    else:
        raise TypeError(f"Unknown expansion strategy: {strategy!r}")

    for s, e in out:
        if not start <= s < e <= end:
            raise ValueError(
                f"{strategy} splits scan range ({start}, {end}) into invalid range ({s}, {e})"
            )
    return out


# -----------------------------------------------------------------------------
# Expansion
# -----------------------------------------------------------------------------

def _group_of(
    window_group: SqlWindowGroup,
    quadrupole_settings: list[QuadrupoleSettings],
) -> QuadrupoleSettings:
    return quadrupole_settings[window_group_to_position(window_group.window_group)]


def _is_excluded(
    gss: int,
    gse: int,
    sws: int,
    swe: int,
    overlap_mode: WindowOverlapMode,
) -> bool:
    if overlap_mode is WindowOverlapMode.LEGACY:
        return swe <= gse or gss <= sws
    return gse <= sws or swe <= gss


def expand_window_settings(
    window_groups: list[SqlWindowGroup],
    quadrupole_settings: list[QuadrupoleSettings],
    strategy: QuadWindowExpansionStrategy,
    overlap_mode: WindowOverlapMode = WindowOverlapMode.LEGACY,
) -> list[QuadrupoleSettings]:
    """
    Split every window group's full scan range and re-aggregate its sub-windows.

    One single-entry QuadrupoleSettings is emitted per (frame, split range),
    indexed by frame. The m/z bounds are the extremes of the member
    isolation windows, the collision energy is weighted by scan overlap, and
    the isolation width is ``mz_min - mz_max`` (not positive). Without any
    member the collision energy is NaN.
    """
    expanded: list[QuadrupoleSettings] = []
    for window_group in window_groups:
        group = _group_of(window_group, quadrupole_settings)
        group_start, group_end = group.scan_range
        for sws, swe in scan_range_subsplit(group_start, group_end, strategy):
            mz_min = sys.float_info.max
            mz_max = -sys.float_info.max
            nce_sum = 0.0
            total_scan_width = 0.0
            for gss, gse, isolation_mz, isolation_width, nce in group.sub_windows():
                if _is_excluded(gss, gse, sws, swe, overlap_mode):
                    continue
                half_isolation_width = isolation_width / 2.0
                mz_min = min(mz_min, isolation_mz - half_isolation_width)
                mz_max = max(mz_max, isolation_mz + half_isolation_width)
                scan_width = float(min(gse, swe) - max(gss, sws))
                nce_sum += nce * scan_width
                total_scan_width += scan_width
            collision_energy = nce_sum / total_scan_width if total_scan_width else float('nan')
            expanded.append(QuadrupoleSettings(
                index=window_group.frame,
                scan_starts=[sws],
                scan_ends=[swe],
                isolation_mz=[(mz_min + mz_max) / 2.0],
                isolation_width=[mz_min - mz_max],
                collision_energy=[collision_energy],
            ))
    return expanded


def expand_quadrupole_settings(
    window_groups: list[SqlWindowGroup],
    quadrupole_settings: list[QuadrupoleSettings],
    strategy: QuadWindowExpansionStrategy,
) -> list[QuadrupoleSettings]:
    """
    Split the scan range of every sub-window of every frame's window group.

    Isolation m/z, width and collision energy are copied unchanged.
    """
    expanded: list[QuadrupoleSettings] = []
    for window_group in window_groups:
        group = _group_of(window_group, quadrupole_settings)
        for scan_start, scan_end, isolation_mz, isolation_width, nce in group.sub_windows():
            for sws, swe in scan_range_subsplit(scan_start, scan_end, strategy):
                expanded.append(QuadrupoleSettings(
                    index=window_group.frame,
                    scan_starts=[sws],
                    scan_ends=[swe],
                    isolation_mz=[isolation_mz],
                    isolation_width=[isolation_width],
                    collision_energy=[nce],
                ))
    return expanded


def expand_settings(
    window_groups: list[SqlWindowGroup],
    quadrupole_settings: list[QuadrupoleSettings],
    splitting_strategy: FrameWindowSplittingStrategy,
) -> list[QuadrupoleSettings]:
    """Dispatch to the expansion matching a splitting strategy."""
    if isinstance(splitting_strategy, QuadrupoleSplitting):
        return expand_quadrupole_settings(
            window_groups, quadrupole_settings, splitting_strategy.strategy
        )
    if isinstance(splitting_strategy, WindowSplitting):
        return expand_window_settings(
            window_groups,
            quadrupole_settings,
            splitting_strategy.strategy,
            splitting_strategy.overlap_mode,
        )
    raise TypeError(f"Unknown splitting strategy: {splitting_strategy!r}")


# -----------------------------------------------------------------------------
# Reader
# -----------------------------------------------------------------------------

class QuadrupoleSettingsReader:
    """
    Build per-window-group quadrupole settings from a TDF store.

    Example:
        >>> groups = QuadrupoleSettingsReader.read("sample.d")
        >>> expanded = QuadrupoleSettingsReader.from_splitting(
        ...     "sample.d", WindowSplitting(Uniform(100, 50))
        ... )
    """

    def __init__(self, sql_quadrupole_settings: list[SqlQuadSettings]):
        self.sql_quadrupole_settings = sql_quadrupole_settings
        window_group_count = max(row.window_group for row in sql_quadrupole_settings)
        self.quadrupole_settings = [
            QuadrupoleSettings(index=position_to_window_group(position))
            for position in range(window_group_count)
        ]
        self._update_from_sql_quadrupole_settings()
        self._resort_groups()

    def _update_from_sql_quadrupole_settings(self) -> None:
        for row in self.sql_quadrupole_settings:
            self.quadrupole_settings[window_group_to_position(row.window_group)].append(
                scan_start=row.scan_start,
                scan_end=row.scan_end,
                isolation_mz=row.mz_center,
                isolation_width=row.mz_width,
                collision_energy=row.collision_energy,
            )

    def _resort_groups(self) -> None:
        self.quadrupole_settings = [
            group.sorted_by_scan_start() for group in self.quadrupole_settings
        ]

    @classmethod
    def from_sql_settings(cls, sql_reader: SqlReader) -> list[QuadrupoleSettings]:
        """Window groups of an open store, sorted by scan start."""
        sql_quadrupole_settings = SqlQuadSettings.from_sql_reader(sql_reader)
        reader = cls(sql_quadrupole_settings)
        logger.debug(
            f"Loaded {len(sql_quadrupole_settings)} isolation windows in "
            f"{len(reader.quadrupole_settings)} window groups"
        )
        return reader.quadrupole_settings

    @classmethod
    def read(cls, path: Path | str) -> list[QuadrupoleSettings]:
        """Window groups of the store at ``path`` (``.d`` folder or ``.tdf`` file)."""
        with SqlReader.open(path) as sql_reader:
            return cls.from_sql_settings(sql_reader)

    @classmethod
    def from_splitting(
        cls,
        path: Path | str,
        splitting_strategy: FrameWindowSplittingStrategy,
    ) -> list[QuadrupoleSettings]:
        """Per-frame expanded settings of the store at ``path``."""
        with SqlReader.open(path) as sql_reader:
            quadrupole_settings = cls.from_sql_settings(sql_reader)
            window_groups = SqlWindowGroup.from_sql_reader(sql_reader)
        expanded = expand_settings(window_groups, quadrupole_settings, splitting_strategy)
        logger.info(
            f"Expanded {len(window_groups)} DIA frames into {len(expanded)} "
            f"isolation windows ({splitting_strategy})"
        )
        return expanded


def read_quadrupole_settings(
    path: Path | str,
    splitting_strategy: Optional[FrameWindowSplittingStrategy] = None,
) -> list[QuadrupoleSettings]:
    """
    Convenience function to read window groups, expanded when a strategy is given.

    Example:
        >>> groups = read_quadrupole_settings("sample.d")
        >>> per_frame = read_quadrupole_settings("sample.d", QuadrupoleSplitting(Even(2)))
    """
    if splitting_strategy is None:
        return QuadrupoleSettingsReader.read(path)
    return QuadrupoleSettingsReader.from_splitting(path, splitting_strategy)
