"""
Precursor readers for timsTOF data.

PrecursorReader picks one backend from the input path:

- ``.tdf`` files or timsTOF ``.d`` folders: TDFPrecursorReader, which reads
  the DDA Precursors table or, for DIA runs, derives one precursor per
  expanded isolation window.
- ``.parquet`` files (miniTDF): MiniTDFPrecursorReader.

The backend is chosen once; every ``get`` goes straight to it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from ..base import PrecursorReaderBackend
from ..errors import PrecursorReaderError, TimsIOError, UnsupportedFormatError
from ..parquet import ReadableParquetTable
from ..registry import RawFormat, detect_format
from ..sql import FrameTable, SqlPrecursor, SqlReader, SqlWindowGroup
from .quadrupole import (
    FrameWindowSplittingStrategy,
    QuadrupoleSettingsReader,
    default_splitting_strategy,
    expand_settings,
)
from ...core import (
    Frame2RtConverter,
    FrameType,
    Precursor,
    QuadrupoleSettings,
    Scan2ImConverter,
)


logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# TDF backend
# -----------------------------------------------------------------------------

class _DDATDFPrecursorReader(PrecursorReaderBackend):
    """One precursor per row of the Precursors table."""

    def __init__(
        self,
        sql_reader: SqlReader,
        rt_converter: Frame2RtConverter,
        im_converter: Scan2ImConverter,
    ):
        self._sql_precursors = SqlPrecursor.from_sql_reader(sql_reader)
        self._rt_converter = rt_converter
        self._im_converter = im_converter

    def get(self, index: int) -> Optional[Precursor]:
        if index < 0 or index >= len(self._sql_precursors):
            return None
        row = self._sql_precursors[index]
        # Parent frame ids are 1-based
        return Precursor(
            mz=row.mz,
            rt=self._rt_converter.convert(row.precursor_frame - 1),
            im=self._im_converter.convert(row.scan_average),
            charge=row.charge,
            intensity=row.intensity,
            index=row.id,
            frame_index=row.precursor_frame,
        )

    def __len__(self) -> int:
        return len(self._sql_precursors)


class _DIATDFPrecursorReader(PrecursorReaderBackend):
    """One precursor per expanded isolation window."""

    def __init__(
        self,
        sql_reader: SqlReader,
        rt_converter: Frame2RtConverter,
        im_converter: Scan2ImConverter,
        splitting_strategy: FrameWindowSplittingStrategy,
    ):
        quadrupole_settings = QuadrupoleSettingsReader.from_sql_settings(sql_reader)
        window_groups = SqlWindowGroup.from_sql_reader(sql_reader)
        self._expanded_quadrupole_settings: list[QuadrupoleSettings] = expand_settings(
            window_groups, quadrupole_settings, splitting_strategy
        )
        self._rt_converter = rt_converter
        self._im_converter = im_converter

    def get(self, index: int) -> Optional[Precursor]:
        if index < 0 or index >= len(self._expanded_quadrupole_settings):
            return None
        quad_settings = self._expanded_quadrupole_settings[index]
        scan_id = (quad_settings.scan_starts[0] + quad_settings.scan_ends[0]) / 2.0
        return Precursor(
            mz=quad_settings.isolation_mz[0],
            rt=self._rt_converter.convert(quad_settings.index - 1),
            im=self._im_converter.convert(scan_id),
            charge=None,
            intensity=None,
            index=index + 1,
            frame_index=quad_settings.index,
        )

    def __len__(self) -> int:
        return len(self._expanded_quadrupole_settings)


class TDFPrecursorReader(PrecursorReaderBackend):
    """
    Precursors of a ``.tdf`` store.

    DIA runs (any MsMsType 9 frame) yield one precursor per expanded
    isolation window; other runs read the DDA Precursors table and ignore
    the splitting strategy.
    """

    def __init__(
        self,
        path: Path | str,
        splitting_strategy: Optional[FrameWindowSplittingStrategy] = None,
    ):
        self.path = Path(path)
        with SqlReader.open(self.path) as sql_reader:
            frame_table = FrameTable.from_sql(sql_reader)
            rt_converter = Frame2RtConverter(frame_table.rt)
            im_converter = Scan2ImConverter.from_sql(sql_reader)
            frame_types = {FrameType.from_msms_type(code) for code in frame_table.msms_type}
            if FrameType.MS2_DIA_PASEF in frame_types:
                logger.debug(f"Reading DIA precursors from {self.path}")
                self._backend: PrecursorReaderBackend = _DIATDFPrecursorReader(
                    sql_reader,
                    rt_converter,
                    im_converter,
                    splitting_strategy or default_splitting_strategy(),
                )
            else:
                logger.debug(f"Reading DDA precursors from {self.path}")
                self._backend = _DDATDFPrecursorReader(sql_reader, rt_converter, im_converter)

    def get(self, index: int) -> Optional[Precursor]:
        return self._backend.get(index)

    def __len__(self) -> int:
        return len(self._backend)


# -----------------------------------------------------------------------------
# miniTDF backend
# -----------------------------------------------------------------------------

@dataclass
class ParquetPrecursor(ReadableParquetTable):
    """One row of a miniTDF ``*.ms2spectrum.parquet`` file."""
    mz: float = 0.0
    rt: float = 0.0
    im: float = 0.0
    charge: int = 0
    intensity: float = 0.0
    index: int = 0
    frame_index: int = 0

    def update_from_parquet_file(self, key: str, value: str) -> None:
        if key == 'Id':
            self.index = self.parse_default_field(value, int, 0)
        elif key == 'RetentionTime':
            self.rt = self.parse_default_field(value, float, 0.0)
        elif key == 'MonoisotopicMz':
            self.mz = self.parse_default_field(value, float, 0.0)
        elif key == 'Charge':
            self.charge = self.parse_default_field(value, int, 0)
        elif key == 'Intensity':
            self.intensity = self.parse_default_field(value, float, 0.0)
        elif key == 'ooK0':
            self.im = self.parse_default_field(value, float, 0.0)
        elif key == 'MS1ParentFrameId':
            self.frame_index = self.parse_default_field(value, int, 0)

    def to_precursor(self) -> Precursor:
        return Precursor(
            mz=self.mz,
            rt=self.rt,
            im=self.im,
            charge=self.charge if self.charge > 0 else None,
            intensity=self.intensity,
            index=self.index,
            frame_index=self.frame_index,
        )


class MiniTDFPrecursorReader(PrecursorReaderBackend):
    """Precursors of a miniTDF parquet file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._precursors = [
            row.to_precursor() for row in ParquetPrecursor.from_parquet_file(self.path)
        ]

    def get(self, index: int) -> Optional[Precursor]:
        if index < 0 or index >= len(self._precursors):
            return None
        return self._precursors[index]

    def __len__(self) -> int:
        return len(self._precursors)


# -----------------------------------------------------------------------------
# Facade
# -----------------------------------------------------------------------------

class PrecursorReader:
    """
    Indexed precursor access for TDF and miniTDF inputs.

    Example:
        >>> reader = PrecursorReader("sample.d")
        >>> first = reader.get(0)
        >>> reader = PrecursorReader("sample.ms2spectrum.parquet")

    Raises:
        UnsupportedFormatError: The path is neither TDF nor parquet, or a
            splitting strategy was given for a parquet file.
        PrecursorReaderError: The selected backend failed to open, or the
            splitting strategy is too fine for the isolation windows.
    """

    def __init__(
        self,
        path: Path | str,
        splitting_strategy: Optional[FrameWindowSplittingStrategy] = None,
    ):
        self.path = Path(path)
        raw_format = detect_format(self.path)

        if raw_format is RawFormat.MINITDF and splitting_strategy is None:
            self._backend = self._open('minitdf', MiniTDFPrecursorReader, self.path)
        elif raw_format is RawFormat.TDF:
            self._backend = self._open(
                'tdf', TDFPrecursorReader, self.path, splitting_strategy
            )
        else:
            raise UnsupportedFormatError(
                f"No precursor reader for {self.path} "
                f"(format: {raw_format.name}, splitting: {splitting_strategy})"
            )
        logger.info(f"Opened {len(self)} precursors from {self.path.name}")

    @staticmethod
    def _open(backend: str, reader_class, *args) -> PrecursorReaderBackend:
        try:
            return reader_class(*args)
        except (TimsIOError, ValueError, IndexError) as e:
            raise PrecursorReaderError(backend, f"{backend} precursor reader failed: {e}") from e

    def get(self, index: int) -> Optional[Precursor]:
        """Precursor at ``index``, or None if out of range."""
        return self._backend.get(index)

    def __len__(self) -> int:
        return len(self._backend)

    def __getitem__(self, index: int) -> Precursor:
        precursor = self.get(index)
        if precursor is None:
            raise IndexError(f"Precursor {index} out of range (0-{len(self) - 1})")
        return precursor

    def __iter__(self) -> Iterator[Precursor]:
        for index in range(len(self)):
            yield self[index]

    def __repr__(self) -> str:
        return f"PrecursorReader({self.path.name}, {len(self)} precursors)"
