"""
Domain converters from raw instrument coordinates to physical units.

Three converters are built once per acquisition and shared read-only by every
frame read:

- Frame2RtConverter: frame position -> retention time (seconds)
- Scan2ImConverter: scan index -> ion mobility (1/K0, Vs/cm^2)
- Tof2MzConverter: TOF index -> m/z

Each converter keeps its own copy of the calibration inputs it was built from.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

if TYPE_CHECKING:
    from ..io.sql import SqlReader


class ConvertableDomain(ABC):
    """
    Pure mapping from a raw coordinate to a calibrated value.

    Subclasses implement :meth:`_apply` on float64 arrays; :meth:`convert`
    and :meth:`convert_array` share that formula.
    """

    @abstractmethod
    def _apply(self, values: NDArray[np.float64]) -> NDArray[np.float64]:
        ...

    def convert(self, value: Union[int, float]) -> float:
        """Convert a single raw value."""
        return float(self._apply(np.asarray([value], dtype=np.float64))[0])

    def convert_array(self, values: ArrayLike) -> NDArray[np.float64]:
        """Convert an array of raw values."""
        return self._apply(np.asarray(values, dtype=np.float64))


class Frame2RtConverter(ConvertableDomain):
    """
    Lookup of the retention time recorded for each frame position.

    Positions are always derived from the Frames table that built the
    converter, so an out-of-range position raises ``IndexError`` and a
    fractional one ``ValueError``.
    """

    def __init__(self, rt_values: ArrayLike):
        self._rt_values = np.array(rt_values, dtype=np.float64)

    def __len__(self) -> int:
        return len(self._rt_values)

    def _apply(self, values: NDArray[np.float64]) -> NDArray[np.float64]:
        fractional = values != np.floor(values)
        if fractional.any():
            raise ValueError(f"Frame positions must be integral, got {values[fractional]}")
        positions = values.astype(np.int64)
        if positions.size and (positions.min() < 0 or positions.max() >= len(self._rt_values)):
            raise IndexError(
                f"Frame position out of range (0-{len(self._rt_values) - 1}): "
                f"{positions.min()}..{positions.max()}"
            )
        return self._rt_values[positions]


class Scan2ImConverter(ConvertableDomain):
    """
    Linear scan -> 1/K0 model spanning the acquisition mobility range.

    Scan 0 maps to ``im_max`` and ``scan_max_index`` maps to ``im_min``.
    """

    def __init__(self, im_min: float, im_max: float, scan_max_index: int):
        if scan_max_index <= 0:
            raise ValueError(f"scan_max_index must be > 0, got {scan_max_index}")
        self.scan_intercept = float(im_max)
        self.scan_slope = (float(im_min) - float(im_max)) / scan_max_index

    @classmethod
    def from_sql(cls, sql_reader: 'SqlReader') -> 'Scan2ImConverter':
        """Build from GlobalMetadata mobility bounds and the largest NumScans."""
        from ..io.sql import FrameTable, GlobalMetadata

        metadata = GlobalMetadata.from_sql(sql_reader)
        frame_table = FrameTable.from_sql(sql_reader)
        return cls(
            im_min=metadata.im_min,
            im_max=metadata.im_max,
            scan_max_index=int(frame_table.num_scans.max()),
        )

    def _apply(self, values: NDArray[np.float64]) -> NDArray[np.float64]:
        return self.scan_intercept + self.scan_slope * values


class Tof2MzConverter(ConvertableDomain):
    """
    TOF index -> m/z model, linear in sqrt(m/z).

    TOF 0 maps to ``mz_min`` and ``tof_max_index`` maps to ``mz_max``.
    """

    def __init__(self, mz_min: float, mz_max: float, tof_max_index: int):
        if tof_max_index <= 0:
            raise ValueError(f"tof_max_index must be > 0, got {tof_max_index}")
        self.tof_intercept = float(np.sqrt(mz_min))
        self.tof_slope = (float(np.sqrt(mz_max)) - self.tof_intercept) / tof_max_index

    @classmethod
    def from_sql(cls, sql_reader: 'SqlReader') -> 'Tof2MzConverter':
        """Build from GlobalMetadata m/z bounds and digitizer sample count."""
        from ..io.sql import GlobalMetadata

        metadata = GlobalMetadata.from_sql(sql_reader)
        return cls(
            mz_min=metadata.mz_min,
            mz_max=metadata.mz_max,
            tof_max_index=metadata.tof_max_index,
        )

    def _apply(self, values: NDArray[np.float64]) -> NDArray[np.float64]:
        return (self.tof_intercept + self.tof_slope * values) ** 2
