"""
I/O module for reading timsTOF data.

This module provides:

Readers:
- TDFReader: Frames of a Bruker .d folder
- PrecursorReader: Precursors from TDF or miniTDF parquet input
- QuadrupoleSettingsReader: DIA isolation window groups

Convenience functions:
- open_run(): Open frames and precursors of a run as a TimsRun
- read_quadrupole_settings(): Window groups, optionally expanded per frame

Base classes:
- FrameReader: Abstract base class for frame readers
- PrecursorReaderBackend: Abstract base class for precursor backends

Registry:
- detect_format(): Detect TDF / miniTDF input from a path
- RawFormat: Enum of supported formats

Errors:
- TimsIOError and its subclasses
"""

from .base import FrameReader, PrecursorReaderBackend
from .errors import (
    BinFileError,
    ParquetError,
    PrecursorReaderError,
    SqlError,
    TimsIOError,
    UnsupportedFormatError,
)
from .registry import RawFormat, detect_format
from .readers import (
    Even,
    FrameReaderOptions,
    FrameWindowSplittingStrategy,
    MiniTDFPrecursorReader,
    NoExpansion,
    PrecursorReader,
    QuadrupoleSettingsReader,
    QuadrupoleSplitting,
    TDFPrecursorReader,
    TDFReader,
    Uniform,
    WindowOverlapMode,
    WindowSplitting,
    expand_quadrupole_settings,
    expand_window_settings,
    read_quadrupole_settings,
    scan_range_subsplit,
)
from .run import TimsRun, open_run

__all__ = [
    # Base
    "FrameReader",
    "PrecursorReaderBackend",
    # Readers
    "TDFReader",
    "PrecursorReader",
    "TDFPrecursorReader",
    "MiniTDFPrecursorReader",
    "QuadrupoleSettingsReader",
    # Convenience functions
    "open_run",
    "read_quadrupole_settings",
    "scan_range_subsplit",
    "expand_window_settings",
    "expand_quadrupole_settings",
    # Run
    "TimsRun",
    # Registry
    "RawFormat",
    "detect_format",
    # Options/Strategies
    "FrameReaderOptions",
    "NoExpansion",
    "Even",
    "Uniform",
    "QuadrupoleSplitting",
    "WindowSplitting",
    "WindowOverlapMode",
    "FrameWindowSplittingStrategy",
    # Errors
    "TimsIOError",
    "SqlError",
    "BinFileError",
    "ParquetError",
    "UnsupportedFormatError",
    "PrecursorReaderError",
]
