"""
Frame reader for Bruker timsTOF ``.d`` folders.

A timsTOF run stores frame metadata in the ``analysis.tdf`` SQLite store and
the frame payloads in ``analysis.tdf_bin``. TDFReader loads the metadata
tables and converters once, then decodes frames on demand or in parallel
batches.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

import numpy as np

from ..base import FrameReader
from ..blob import BIN_FILE_NAME, BinFileReader, decode_frame
from ..sql import (
    TDF_FILE_NAME,
    DiaFramesInfoTable,
    DiaFramesMsMsTable,
    FrameTable,
    GlobalMetadata,
    SqlReader,
)
from ...core import (
    ConvertableDomain,
    Frame,
    Frame2RtConverter,
    FrameType,
    Scan2ImConverter,
    Tof2MzConverter,
)
from ...utils.parallel import ParallelMode, get_system_resources, parallel_map


logger = logging.getLogger(__name__)


@dataclass
class FrameReaderOptions:
    """Options for opening a TDF run."""

    # Worker threads for the read_all_* family
    parallel_mode: ParallelMode = ParallelMode.MAX
    custom_workers: Optional[int] = None

    # File names inside the .d folder
    tdf_file_name: str = TDF_FILE_NAME
    bin_file_name: str = BIN_FILE_NAME


def resolve_tdf_paths(path: Path, options: FrameReaderOptions) -> tuple[Path, Path]:
    """Return (metadata store, blob file) for a ``.d`` folder or ``.tdf`` file."""
    if path.is_dir():
        tdf_path = path / options.tdf_file_name
    else:
        tdf_path = path
    return tdf_path, tdf_path.parent / options.bin_file_name


class TDFReader(FrameReader):
    """
    Reader for timsTOF frames.

    Construction is single-threaded and eager: it loads the Frames table,
    the DIA tables (empty for DDA runs) and builds all three converters.
    Nothing is mutated afterwards, so batch reads share the reader across
    worker threads.

    Example:
        >>> with TDFReader("sample.d") as reader:
        ...     frame = reader.read_single_frame(0)
        ...     ms1 = [f for f in reader.read_all_ms1_frames() if not f.is_empty]
    """

    vendor: ClassVar[str] = "Bruker"
    supported_extensions: ClassVar[list[str]] = ['.d', '.tdf']

    def __init__(
        self,
        path: Path | str,
        options: Optional[FrameReaderOptions] = None,
        im_converter: Optional[ConvertableDomain] = None,
        mz_converter: Optional[ConvertableDomain] = None,
    ):
        """
        Initialize the TDF reader.

        Args:
            path: Path to a ``.d`` folder or its ``analysis.tdf`` file.
            options: Reader options.
            im_converter: Scan -> ion mobility converter. Built from the
                store when None.
            mz_converter: TOF -> m/z converter. Built from the store when None.
        """
        super().__init__(path)
        self._options = options or FrameReaderOptions()
        self.tdf_path, self.bin_path = resolve_tdf_paths(self.path, self._options)

        logger.info(f"Reading frame metadata for {self.path}")
        with SqlReader.open(self.tdf_path) as sql_reader:
            self.frame_table = FrameTable.from_sql(sql_reader)
            self.dia_frame_table = DiaFramesInfoTable.from_sql(sql_reader)
            self.dia_frame_msms_table = DiaFramesMsMsTable.from_sql(sql_reader)
            metadata = GlobalMetadata.from_sql(sql_reader)
            self.im_converter = im_converter or Scan2ImConverter(
                im_min=metadata.im_min,
                im_max=metadata.im_max,
                scan_max_index=int(self.frame_table.num_scans.max()),
            )
            self.mz_converter = mz_converter or Tof2MzConverter(
                mz_min=metadata.mz_min,
                mz_max=metadata.mz_max,
                tof_max_index=metadata.tof_max_index,
            )

        self._frame_types = [
            FrameType.from_msms_type(code) for code in self.frame_table.msms_type
        ]
        self.rt_converter = Frame2RtConverter(self.frame_table.rt)
        self._bin_reader = BinFileReader(
            self.bin_path,
            self.frame_table.offsets,
            compression_type=metadata.compression_type,
        )

        resources = get_system_resources()
        self.n_workers = resources.get_workers(
            self._options.parallel_mode, self._options.custom_workers
        )
        logger.info(
            f"Opened {self.path.name}: {len(self)} frames, "
            f"{len(self.dia_frame_table)} DIA frame entries, {self.n_workers} workers"
        )

    def __len__(self) -> int:
        """Number of frame records in the blob file."""
        return len(self._bin_reader)

    @property
    def frame_types(self) -> list[FrameType]:
        return self._frame_types

    @property
    def acquisition_mode(self) -> str:
        """'diaPASEF', 'ddaPASEF' or 'noPASEF'."""
        if FrameType.MS2_DIA_PASEF in self._frame_types:
            return 'diaPASEF'
        if FrameType.MS2_DDA_PASEF in self._frame_types:
            return 'ddaPASEF'
        return 'noPASEF'

    def read_single_frame(self, index: int) -> Frame:
        """
        Decode the frame at a position.

        The retention time, global id and type come from the Frames table
        row at the same position.
        """
        frame = decode_frame(self._bin_reader.read_blob(index))
        return frame.with_identity(
            index=int(self.frame_table.id[index]),
            rt=self.rt_converter.convert(index),
            frame_type=self._frame_types[index],
        )

    def read_all_dia_frames(self) -> list[Frame]:
        """
        Read every frame listed in DiaFrameMsMsInfo.

        Frame ids are used as positions; ids outside the blob file are
        dropped, so the result is compact.
        """
        frame_count = len(self)
        dia_frame_ids = self.dia_frame_table.frame
        valid = dia_frame_ids[(dia_frame_ids >= 0) & (dia_frame_ids < frame_count)]
        dropped = len(dia_frame_ids) - len(valid)
        if dropped:
            logger.warning(f"Dropped {dropped} DIA frame ids outside 0-{frame_count - 1}")
        return parallel_map(
            self.read_single_frame,
            [int(frame_id) for frame_id in valid],
            self.n_workers,
        )

    def dia_window_groups(self) -> dict[int, np.ndarray]:
        """Frame ids of every DIA window group."""
        return {
            int(group): self.dia_frame_table.frame[self.dia_frame_table.window_group == group]
            for group in np.unique(self.dia_frame_table.window_group)
        }

    @property
    def run_metadata(self) -> dict:
        """File-level information about the run."""
        return {
            'source_file': str(self.path),
            'acquisition_mode': self.acquisition_mode,
            'n_frames': len(self),
            'rt_range_seconds': (
                (float(self.frame_table.rt.min()), float(self.frame_table.rt.max()))
                if len(self.frame_table) else None
            ),
        }
