"""
TimsRun: frames, precursors and isolation windows of one acquisition.

This module bundles the readers of a single ``.d`` folder behind one object
opened with :func:`open_run`.
"""

import logging
from pathlib import Path
from typing import Optional

from .readers.precursors import PrecursorReader
from .readers.quadrupole import FrameWindowSplittingStrategy, read_quadrupole_settings
from .readers.tdf import FrameReaderOptions, TDFReader
from ..core import QuadrupoleSettings


logger = logging.getLogger(__name__)


class TimsRun:
    """
    A timsTOF acquisition opened for reading.

    Attributes:
        path: Path to the ``.d`` folder (or ``analysis.tdf`` file).
        frames: Frame reader.
        precursors: Precursor reader.
        splitting_strategy: Strategy used for DIA precursors.

    Example:
        >>> run = open_run("sample.d")
        >>> ms2 = [f for f in run.frames.read_all_ms2_frames() if not f.is_empty]
        >>> windows = run.quadrupole_settings()
    """

    def __init__(
        self,
        path: Path | str,
        splitting_strategy: Optional[FrameWindowSplittingStrategy] = None,
        options: Optional[FrameReaderOptions] = None,
    ):
        self.path = Path(path)
        self.splitting_strategy = splitting_strategy
        self.frames = TDFReader(self.path, options=options)
        self.precursors = PrecursorReader(self.path, splitting_strategy)

    def quadrupole_settings(
        self,
        splitting_strategy: Optional[FrameWindowSplittingStrategy] = None,
    ) -> list[QuadrupoleSettings]:
        """
        Window groups of a DIA run, or their per-frame expansion.

        Args:
            splitting_strategy: None for one entry per window group, a
                strategy for one entry per (frame, split range).
        """
        return read_quadrupole_settings(self.frames.tdf_path, splitting_strategy)

    def summary(self) -> dict:
        """
        Generate a summary of the run.

        Returns:
            Dictionary with run statistics.
        """
        summary = dict(self.frames.run_metadata)
        summary['frame_type_counts'] = {
            frame_type.name: count
            for frame_type, count in self.frames.get_frame_type_counts().items()
        }
        summary['n_precursors'] = len(self.precursors)
        if self.frames.acquisition_mode == 'diaPASEF':
            summary['n_window_groups'] = len(self.quadrupole_settings())
        return summary

    def __repr__(self) -> str:
        return (
            f"TimsRun({self.path.name}, {len(self.frames)} frames, "
            f"{self.frames.acquisition_mode}, {len(self.precursors)} precursors)"
        )


def open_run(
    path: Path | str,
    splitting_strategy: Optional[FrameWindowSplittingStrategy] = None,
    options: Optional[FrameReaderOptions] = None,
) -> TimsRun:
    """
    Convenience function to open a timsTOF run.

    Args:
        path: Path to a ``.d`` folder or its ``analysis.tdf`` file.
        splitting_strategy: Window splitting for DIA precursors.
        options: Frame reader options.

    Returns:
        TimsRun with frame and precursor readers.

    Example:
        >>> run = open_run("sample.d", QuadrupoleSplitting(Even(2)))
        >>> print(run.summary())
    """
    run = TimsRun(path, splitting_strategy=splitting_strategy, options=options)
    logger.info(f"Opened {run!r}")
    return run
