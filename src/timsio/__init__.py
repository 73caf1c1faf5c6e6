"""
timsio: read timsTOF acquisitions into calibrated frames, precursors and
DIA isolation windows.
"""

from .core import (
    AcquisitionType,
    Frame,
    FrameType,
    Precursor,
    QuadrupoleSettings,
)
from .io import (
    Even,
    NoExpansion,
    PrecursorReader,
    QuadrupoleSettingsReader,
    QuadrupoleSplitting,
    TDFReader,
    TimsRun,
    Uniform,
    WindowSplitting,
    open_run,
    read_quadrupole_settings,
)

__version__ = "0.1.0"

__all__ = [
    "AcquisitionType",
    "Frame",
    "FrameType",
    "Precursor",
    "QuadrupoleSettings",
    "TDFReader",
    "PrecursorReader",
    "QuadrupoleSettingsReader",
    "TimsRun",
    "open_run",
    "read_quadrupole_settings",
    "NoExpansion",
    "Even",
    "Uniform",
    "QuadrupoleSplitting",
    "WindowSplitting",
]
