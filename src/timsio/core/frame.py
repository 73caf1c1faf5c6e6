"""
Frame representation for timsio.

A Frame is one TIMS scan cycle: a set of mobility scans, each holding TOF
indices and intensities. Peaks are stored flat with CSR-style scan offsets,
so the peaks of scan ``i`` are ``tof_indices[scan_offsets[i]:scan_offsets[i + 1]]``.
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from .acquisition import FrameType

if TYPE_CHECKING:
    from .converters import ConvertableDomain


def _empty_offsets() -> NDArray[np.int64]:
    return np.zeros(1, dtype=np.int64)


def _empty_peaks() -> NDArray[np.uint32]:
    return np.zeros(0, dtype=np.uint32)


@dataclass(frozen=True, slots=True, eq=False)
class Frame:
    """
    A fully materialized frame.

    ``Frame()`` with no arguments is the empty sentinel used as a placeholder
    for frames excluded from a typed batch read.

    Attributes:
        scan_offsets: Peak offsets per scan, length ``n_scans + 1``.
        tof_indices: TOF index of every peak.
        intensities: Intensity of every peak.
        index: Global frame id from the Frames table.
        rt: Retention time in seconds.
        frame_type: Frame class derived from the raw MsMsType code.

    Example:
        >>> frame = Frame(
        ...     scan_offsets=np.array([0, 2, 3]),
        ...     tof_indices=np.array([10, 20, 30], dtype=np.uint32),
        ...     intensities=np.array([5, 6, 7], dtype=np.uint32),
        ... )
        >>> frame.n_scans, frame.n_peaks
        (2, 3)
    """
    scan_offsets: NDArray[np.int64] = field(default_factory=_empty_offsets)
    tof_indices: NDArray[np.uint32] = field(default_factory=_empty_peaks)
    intensities: NDArray[np.uint32] = field(default_factory=_empty_peaks)
    index: int = 0
    rt: float = 0.0
    frame_type: FrameType = FrameType.UNKNOWN

    def __post_init__(self) -> None:
        """Validate array consistency."""
        if self.scan_offsets.ndim != 1 or len(self.scan_offsets) < 1:
            raise ValueError("scan_offsets must be 1-dimensional with at least one entry")
        if len(self.tof_indices) != len(self.intensities):
            raise ValueError(
                f"tof_indices and intensities must have same length, "
                f"got {len(self.tof_indices)} and {len(self.intensities)}"
            )
        if int(self.scan_offsets[-1]) != len(self.tof_indices):
            raise ValueError(
                f"last scan offset ({int(self.scan_offsets[-1])}) must equal "
                f"number of peaks ({len(self.tof_indices)})"
            )
        if self.scan_offsets.dtype != np.int64:
            object.__setattr__(self, 'scan_offsets', self.scan_offsets.astype(np.int64))
        if self.tof_indices.dtype != np.uint32:
            object.__setattr__(self, 'tof_indices', self.tof_indices.astype(np.uint32))
        if self.intensities.dtype != np.uint32:
            object.__setattr__(self, 'intensities', self.intensities.astype(np.uint32))

    @property
    def n_scans(self) -> int:
        """Number of mobility scans in the frame."""
        return len(self.scan_offsets) - 1

    @property
    def n_peaks(self) -> int:
        """Number of peaks over all scans."""
        return len(self.tof_indices)

    @property
    def is_empty(self) -> bool:
        """True for frames without peaks, including the sentinel."""
        return self.n_peaks == 0

    def get_scan(self, scan: int) -> tuple[NDArray[np.uint32], NDArray[np.uint32]]:
        """
        Return (tof_indices, intensities) of one scan.

        Raises:
            IndexError: If scan is out of range.
        """
        if scan < 0 or scan >= self.n_scans:
            raise IndexError(f"Scan {scan} out of range (0-{self.n_scans - 1})")
        start, end = self.scan_offsets[scan], self.scan_offsets[scan + 1]
        return self.tof_indices[start:end], self.intensities[start:end]

    def scan_indices(self) -> NDArray[np.int64]:
        """Scan index of every peak."""
        return np.repeat(
            np.arange(self.n_scans, dtype=np.int64),
            np.diff(self.scan_offsets),
        )

    def mz_values(self, mz_converter: 'ConvertableDomain') -> NDArray[np.float64]:
        """Calibrated m/z of every peak."""
        return mz_converter.convert_array(self.tof_indices)

    def im_values(self, im_converter: 'ConvertableDomain') -> NDArray[np.float64]:
        """Calibrated ion mobility of every peak."""
        return im_converter.convert_array(self.scan_indices())

    def with_identity(self, index: int, rt: float, frame_type: FrameType) -> 'Frame':
        """Return a copy carrying the given frame id, retention time and type."""
        return replace(self, index=int(index), rt=float(rt), frame_type=frame_type)

    def __len__(self) -> int:
        """Return number of peaks."""
        return self.n_peaks

    def __repr__(self) -> str:
        return (
            f"Frame(index={self.index}, {self.frame_type.name}, "
            f"RT={self.rt:.2f}s, {self.n_scans} scans, {self.n_peaks} peaks)"
        )
