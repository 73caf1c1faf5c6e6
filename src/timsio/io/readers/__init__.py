"""
timsTOF readers.

This module provides:

Frames:
- TDFReader: Frames of a Bruker .d folder (analysis.tdf + analysis.tdf_bin)

Precursors:
- PrecursorReader: Picks the TDF or miniTDF backend from the path
- TDFPrecursorReader: DDA Precursors table or DIA isolation windows
- MiniTDFPrecursorReader: miniTDF parquet files

Isolation windows:
- QuadrupoleSettingsReader: Window groups of DIA runs
- read_quadrupole_settings(): Window groups, optionally expanded per frame
- Expansion strategies: NoExpansion, Even, Uniform
- Splitting strategies: QuadrupoleSplitting, WindowSplitting
"""

from .tdf import FrameReaderOptions, TDFReader
from .precursors import (
    MiniTDFPrecursorReader,
    PrecursorReader,
    TDFPrecursorReader,
)
from .quadrupole import (
    Even,
    FrameWindowSplittingStrategy,
    NoExpansion,
    QuadWindowExpansionStrategy,
    QuadrupoleSettingsReader,
    QuadrupoleSplitting,
    Uniform,
    WindowOverlapMode,
    WindowSplitting,
    expand_quadrupole_settings,
    expand_window_settings,
    read_quadrupole_settings,
    scan_range_subsplit,
)

__all__ = [
    # Frames
    "TDFReader",
    "FrameReaderOptions",
    # Precursors
    "PrecursorReader",
    "TDFPrecursorReader",
    "MiniTDFPrecursorReader",
    # Isolation windows
    "QuadrupoleSettingsReader",
    "read_quadrupole_settings",
    "scan_range_subsplit",
    "expand_window_settings",
    "expand_quadrupole_settings",
    # Strategies
    "NoExpansion",
    "Even",
    "Uniform",
    "QuadWindowExpansionStrategy",
    "QuadrupoleSplitting",
    "WindowSplitting",
    "WindowOverlapMode",
    "FrameWindowSplittingStrategy",
]
