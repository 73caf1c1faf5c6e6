"""
Core data structures for timsio.

This module provides the fundamental data types for representing
timsTOF acquisitions:

- Frame: One TIMS scan cycle with peaks per mobility scan
- Precursor: A fragmentation event record
- QuadrupoleSettings: Isolation sub-windows of a DIA window group

Converters from raw coordinates to physical units:
- Frame2RtConverter, Scan2ImConverter, Tof2MzConverter

Enums for categorical metadata:
- AcquisitionType: DDA-PASEF / DIA-PASEF
- FrameType: MS1 / MS2 (with acquisition type) / unknown
"""

from .acquisition import AcquisitionType, FrameType
from .converters import (
    ConvertableDomain,
    Frame2RtConverter,
    Scan2ImConverter,
    Tof2MzConverter,
)
from .frame import Frame
from .precursor import Precursor
from .quadrupole import (
    QuadrupoleSettings,
    position_to_window_group,
    window_group_to_position,
)

__all__ = [
    # Main classes
    "Frame",
    "Precursor",
    "QuadrupoleSettings",
    # Converters
    "ConvertableDomain",
    "Frame2RtConverter",
    "Scan2ImConverter",
    "Tof2MzConverter",
    # Enums
    "AcquisitionType",
    "FrameType",
    # Window group index helpers
    "position_to_window_group",
    "window_group_to_position",
]
