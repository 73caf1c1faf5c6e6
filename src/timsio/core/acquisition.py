"""
Acquisition and frame type tags for timsTOF runs.

Every frame in the Frames table carries a raw ``MsMsType`` code. This module
maps those codes onto the frame classes used throughout timsio.
"""

from enum import Enum, auto
from typing import Optional


class AcquisitionType(Enum):
    """How an MS2 frame was acquired."""
    DDA_PASEF = auto()   # Data-dependent PASEF
    DIA_PASEF = auto()   # Data-independent PASEF
    UNKNOWN = auto()


class FrameType(Enum):
    """
    Frame class: MS1, MS2 with its acquisition type, or unknown.

    Derived once per frame from the raw ``MsMsType`` code with
    :meth:`from_msms_type`.
    """
    MS1 = auto()
    MS2_DDA_PASEF = auto()
    MS2_DIA_PASEF = auto()
    UNKNOWN = auto()

    @classmethod
    def from_msms_type(cls, msms_type: int) -> 'FrameType':
        """Map a raw ``MsMsType`` code to a frame type."""
        return _MSMS_TYPE_MAP.get(int(msms_type), cls.UNKNOWN)

    @property
    def ms_level(self) -> Optional[int]:
        """1 for MS1, 2 for MS2, None for unknown frames."""
        if self is FrameType.MS1:
            return 1
        if self.is_ms2:
            return 2
        return None

    @property
    def is_ms1(self) -> bool:
        return self is FrameType.MS1

    @property
    def is_ms2(self) -> bool:
        return self in (FrameType.MS2_DDA_PASEF, FrameType.MS2_DIA_PASEF)

    @property
    def acquisition_type(self) -> Optional[AcquisitionType]:
        """Acquisition type of an MS2 frame, None otherwise."""
        if self is FrameType.MS2_DDA_PASEF:
            return AcquisitionType.DDA_PASEF
        if self is FrameType.MS2_DIA_PASEF:
            return AcquisitionType.DIA_PASEF
        return None


# MsMsType codes written by timsControl
_MSMS_TYPE_MAP: dict[int, FrameType] = {
    0: FrameType.MS1,
    8: FrameType.MS2_DDA_PASEF,
    9: FrameType.MS2_DIA_PASEF,
}
