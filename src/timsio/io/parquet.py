"""
Row mapping for parquet tables.

Records are built by starting from the record type's defaults and updating
one field per (column name, value) pair. Unknown columns are ignored and
values that do not parse keep the field default.
"""

import logging
from pathlib import Path
from typing import Callable, TypeVar

import pyarrow as pa
import pyarrow.parquet as pq

from .errors import ParquetError


logger = logging.getLogger(__name__)

T = TypeVar('T')
P = TypeVar('P', bound='ReadableParquetTable')


class ReadableParquetTable:
    """
    Mixin for records readable from a parquet file.

    Subclasses must be constructible without arguments and implement
    :meth:`update_from_parquet_file`.
    """

    def update_from_parquet_file(self, key: str, value: str) -> None:
        raise NotImplementedError

    @staticmethod
    def parse_default_field(value: str, parse: Callable[[str], T], default: T) -> T:
        """Parse ``value``, falling back to ``default`` when it does not parse."""
        try:
            return parse(value)
        except (TypeError, ValueError):
            return default

    @classmethod
    def from_parquet_file(cls: type[P], path: Path | str, batch_size: int = 65536) -> list[P]:
        """Read every row of a parquet file into a record."""
        path = Path(path)
        if not path.is_file():
            raise ParquetError(f"Parquet file not found: {path}")
        try:
            parquet_file = pq.ParquetFile(path)
            records = []
            for batch in parquet_file.iter_batches(batch_size=batch_size):
                for row in batch.to_pylist():
                    record = cls()
                    for name, value in row.items():
                        record.update_from_parquet_file(name, str(value))
                    records.append(record)
        except (OSError, pa.ArrowException) as e:
            raise ParquetError(f"Cannot read parquet file {path}: {e}") from e
        logger.debug(f"Read {len(records)} rows from {path.name}")
        return records
