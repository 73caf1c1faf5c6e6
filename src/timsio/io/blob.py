"""
Reader for the ``analysis.tdf_bin`` frame blob file.

Each frame record starts at the byte offset stored in Frames.TimsId:

- uint32: total record size in bytes (header included)
- uint32: number of scans
- zstd-compressed payload

The decompressed payload is a byte-shuffled uint32 array (all first bytes,
then all second bytes, ...). Unshuffled, it holds the scan count, the peak
count of every scan but the last (times two), and then interleaved
(tof delta, intensity) pairs.
"""

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
import pyzstd
from numpy.typing import NDArray

from ..core.frame import Frame
from .errors import BinFileError


logger = logging.getLogger(__name__)

BIN_FILE_NAME = 'analysis.tdf_bin'
HEADER_SIZE = 8
ZSTD_COMPRESSION = 2


def _unshuffle(decompressed: bytes) -> NDArray[np.uint32]:
    """Undo the byte transposition of a decompressed payload."""
    raw = np.frombuffer(decompressed, dtype=np.uint8)
    if raw.size % 4:
        raise BinFileError(f"Payload size {raw.size} is not a multiple of 4")
    return raw.reshape(4, -1).T.copy().view('<u4').ravel()


class BinFileReader:
    """
    Random access to frame records of a blob file.

    Every read opens its own file handle, so a single reader can be shared
    by concurrent workers.

    Args:
        path: Path to ``analysis.tdf_bin``.
        offsets: Byte offset of each record, in frame-table order.
        compression_type: TimsCompressionType from GlobalMetadata.
    """

    def __init__(
        self,
        path: Path | str,
        offsets: Sequence[int],
        compression_type: int = ZSTD_COMPRESSION,
    ):
        self.path = Path(path)
        if not self.path.is_file():
            raise BinFileError(f"Blob file not found: {self.path}")
        if compression_type != ZSTD_COMPRESSION:
            raise BinFileError(
                f"Unsupported TimsCompressionType {compression_type} for {self.path}"
            )
        self._offsets = np.array(offsets, dtype=np.int64)

    def __len__(self) -> int:
        """Number of records."""
        return len(self._offsets)

    def size(self) -> int:
        """Alias for __len__."""
        return len(self)

    def read_blob(self, index: int) -> NDArray[np.uint32]:
        """
        Read and decompress one record.

        Returns:
            The unshuffled uint32 payload; empty for records without data.

        Raises:
            IndexError: If index is out of range.
            BinFileError: If the record is truncated or corrupt.
        """
        if index < 0 or index >= len(self._offsets):
            raise IndexError(f"Record {index} out of range (0-{len(self._offsets) - 1})")
        offset = int(self._offsets[index])
        try:
            with open(self.path, 'rb') as infile:
                infile.seek(offset)
                header = infile.read(HEADER_SIZE)
                if len(header) < HEADER_SIZE:
                    raise BinFileError(f"Truncated header for record {index} at offset {offset}")
                byte_count = int.from_bytes(header[:4], 'little')
                if byte_count <= HEADER_SIZE:
                    return np.zeros(0, dtype=np.uint32)
                compressed = infile.read(byte_count - HEADER_SIZE)
        except OSError as e:
            raise BinFileError(f"Cannot read record {index} from {self.path}: {e}") from e

        if len(compressed) != byte_count - HEADER_SIZE:
            raise BinFileError(f"Truncated payload for record {index} at offset {offset}")
        try:
            decompressed = pyzstd.decompress(compressed)
        except pyzstd.ZstdError as e:
            raise BinFileError(f"Cannot decompress record {index}: {e}") from e
        return _unshuffle(decompressed)


def decode_frame(blob: NDArray[np.uint32]) -> Frame:
    """
    Decode an unshuffled frame payload into a Frame.

    Identity fields (index, rt, frame_type) are left at their defaults.
    """
    if blob.size == 0 or int(blob[0]) == 0:
        return Frame()
    scan_count = int(blob[0])
    if blob.size < scan_count:
        raise BinFileError(f"Payload of {blob.size} values holds fewer than {scan_count} scans")
    peak_count = (blob.size - scan_count) // 2

    scan_sizes = np.empty(scan_count, dtype=np.int64)
    scan_sizes[:-1] = blob[1:scan_count].astype(np.int64) // 2
    scan_sizes[-1] = peak_count - scan_sizes[:-1].sum()
    if scan_sizes[-1] < 0:
        raise BinFileError(
            f"Scan sizes ({scan_sizes[:-1].sum()}) exceed peak count ({peak_count})"
        )
    scan_offsets = np.zeros(scan_count + 1, dtype=np.int64)
    np.cumsum(scan_sizes, out=scan_offsets[1:])

    peaks = blob[scan_count:scan_count + 2 * peak_count]
    tof_deltas = peaks[0::2].astype(np.int64)
    intensities = peaks[1::2].astype(np.uint32)

    # TOF indices are delta-encoded per scan, shifted by one
    cumulative = np.cumsum(tof_deltas)
    before_scan = np.concatenate(([0], cumulative))[scan_offsets[:-1]]
    tof_indices = cumulative - np.repeat(before_scan, scan_sizes) - 1

    return Frame(
        scan_offsets=scan_offsets,
        tof_indices=tof_indices.astype(np.uint32),
        intensities=intensities,
    )
