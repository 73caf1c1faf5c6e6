"""
Exceptions raised while opening and reading timsTOF data.

All errors derive from TimsIOError. The originating exception (sqlite3,
OSError, pyarrow, ...) is chained as ``__cause__``.
"""

from typing import Optional


class TimsIOError(Exception):
    """Base class for timsio read errors."""


class SqlError(TimsIOError):
    """The metadata store cannot be opened, queried, or lacks required rows."""


class BinFileError(TimsIOError):
    """The binary blob file cannot be opened or a record cannot be decoded."""


class ParquetError(TimsIOError):
    """A parquet file cannot be opened or iterated."""


class UnsupportedFormatError(TimsIOError, ValueError):
    """No reader handles this input shape and configuration."""


class PrecursorReaderError(TimsIOError):
    """
    A precursor backend failed to construct.

    Attributes:
        backend: Name of the backend that failed ("tdf" or "minitdf").
    """

    def __init__(self, backend: str, message: Optional[str] = None):
        self.backend = backend
        super().__init__(message or f"{backend} precursor reader failed")
