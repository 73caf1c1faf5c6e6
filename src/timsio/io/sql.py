"""
Typed access to the ``analysis.tdf`` SQLite metadata store.

Tables the readers depend on are loaded with pandas into either columnar
tables (numpy arrays, one per column) or lists of row records. Each loader
raises SqlError on missing tables or I/O problems.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from .errors import SqlError


logger = logging.getLogger(__name__)

TDF_FILE_NAME = 'analysis.tdf'


class SqlReader:
    """
    Read-only connection to an ``analysis.tdf`` store.

    Accepts either the ``.tdf`` file itself or the ``.d`` folder holding it.

    Example:
        >>> with SqlReader.open("sample.d") as sql_reader:
        ...     frames = FrameTable.from_sql(sql_reader)
    """

    def __init__(self, path: Path | str):
        path = Path(path)
        if path.is_dir():
            path = path / TDF_FILE_NAME
        if not path.is_file():
            raise SqlError(f"Metadata store not found: {path}")
        self.path = path
        try:
            self._connection: Optional[sqlite3.Connection] = sqlite3.connect(
                f"{path.resolve().as_uri()}?mode=ro", uri=True, check_same_thread=False
            )
        except sqlite3.Error as e:
            raise SqlError(f"Cannot open metadata store {path}: {e}") from e

    @classmethod
    def open(cls, path: Path | str) -> 'SqlReader':
        return cls(path)

    def __enter__(self) -> 'SqlReader':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def has_table(self, table: str) -> bool:
        """Check whether a table exists in the store."""
        result = self.read_query(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            params=(table,),
        )
        return len(result) > 0

    def read_query(self, query: str, params: tuple = ()) -> pd.DataFrame:
        """Run a query and return the result as a DataFrame."""
        if self._connection is None:
            raise SqlError(f"Metadata store {self.path} is closed")
        logger.debug(f"Query on {self.path.name}: {query}")
        try:
            return pd.read_sql_query(query, self._connection, params=params)
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise SqlError(f"Query failed on {self.path}: {query!r}: {e}") from e

    def read_table(
        self,
        table: str,
        columns: list[str],
        require_rows: bool = True,
    ) -> pd.DataFrame:
        """
        Read selected columns of a table.

        Args:
            table: Table name.
            columns: Columns to select.
            require_rows: Raise SqlError when the table is empty.
        """
        query = f"SELECT {', '.join(columns)} FROM {table}"
        df = self.read_query(query)
        if require_rows and df.empty:
            raise SqlError(f"Table {table} in {self.path} has no rows")
        return df


def _optional_table(
    sql_reader: SqlReader,
    table: str,
    columns: list[str],
) -> pd.DataFrame:
    """Read a table that DDA runs do not have; empty frame when absent."""
    if not sql_reader.has_table(table):
        logger.debug(f"Table {table} not present in {sql_reader.path}")
        return pd.DataFrame({column: [] for column in columns})
    return sql_reader.read_table(table, columns, require_rows=False)


# -----------------------------------------------------------------------------
# Columnar tables
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FrameTable:
    """
    Frame directory in physical blob order.

    Attributes:
        id: Global frame id (distinct from row position).
        rt: Retention time (seconds) recorded per frame.
        offsets: Byte offset of each frame in ``analysis.tdf_bin``.
        msms_type: Raw MsMsType code.
        num_scans: Number of mobility scans per frame.
    """
    id: NDArray[np.int64]
    rt: NDArray[np.float64]
    offsets: NDArray[np.int64]
    msms_type: NDArray[np.int64]
    num_scans: NDArray[np.int64]

    @classmethod
    def from_sql(cls, sql_reader: SqlReader) -> 'FrameTable':
        df = sql_reader.read_table(
            'Frames', ['Id', 'Time', 'TimsId', 'MsMsType', 'NumScans']
        )
        return cls(
            id=df['Id'].to_numpy(dtype=np.int64),
            rt=df['Time'].to_numpy(dtype=np.float64),
            offsets=df['TimsId'].to_numpy(dtype=np.int64),
            msms_type=df['MsMsType'].to_numpy(dtype=np.int64),
            num_scans=df['NumScans'].to_numpy(dtype=np.int64),
        )

    def __len__(self) -> int:
        return len(self.id)


@dataclass(frozen=True)
class DiaFramesInfoTable:
    """Window group active in each DIA frame (DiaFrameMsMsInfo)."""
    frame: NDArray[np.int64]
    window_group: NDArray[np.int64]

    @classmethod
    def from_sql(cls, sql_reader: SqlReader) -> 'DiaFramesInfoTable':
        df = _optional_table(sql_reader, 'DiaFrameMsMsInfo', ['Frame', 'WindowGroup'])
        return cls(
            frame=df['Frame'].to_numpy(dtype=np.int64),
            window_group=df['WindowGroup'].to_numpy(dtype=np.int64),
        )

    def __len__(self) -> int:
        return len(self.frame)


@dataclass(frozen=True)
class DiaFramesMsMsTable:
    """Isolation sub-windows per window group (DiaFrameMsMsWindows)."""
    window_group: NDArray[np.int64]
    scan_start: NDArray[np.int64]
    scan_end: NDArray[np.int64]
    isolation_mz: NDArray[np.float64]
    isolation_width: NDArray[np.float64]
    collision_energy: NDArray[np.float64]

    @classmethod
    def from_sql(cls, sql_reader: SqlReader) -> 'DiaFramesMsMsTable':
        df = _optional_table(sql_reader, 'DiaFrameMsMsWindows', _QUAD_COLUMNS)
        return cls(
            window_group=df['WindowGroup'].to_numpy(dtype=np.int64),
            scan_start=df['ScanNumBegin'].to_numpy(dtype=np.int64),
            scan_end=df['ScanNumEnd'].to_numpy(dtype=np.int64),
            isolation_mz=df['IsolationMz'].to_numpy(dtype=np.float64),
            isolation_width=df['IsolationWidth'].to_numpy(dtype=np.float64),
            collision_energy=df['CollisionEnergy'].to_numpy(dtype=np.float64),
        )

    def __len__(self) -> int:
        return len(self.window_group)


_QUAD_COLUMNS = [
    'WindowGroup',
    'ScanNumBegin',
    'ScanNumEnd',
    'IsolationMz',
    'IsolationWidth',
    'CollisionEnergy',
]


# -----------------------------------------------------------------------------
# Row records
# -----------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SqlWindowGroup:
    """One (frame, window group) association of a DIA run."""
    frame: int
    window_group: int

    @classmethod
    def from_sql_reader(cls, sql_reader: SqlReader) -> list['SqlWindowGroup']:
        df = sql_reader.read_table('DiaFrameMsMsInfo', ['Frame', 'WindowGroup'])
        return [
            cls(frame=int(frame), window_group=int(window_group))
            for frame, window_group in zip(df['Frame'], df['WindowGroup'])
        ]


@dataclass(frozen=True, slots=True)
class SqlQuadSettings:
    """One isolation sub-window row of DiaFrameMsMsWindows."""
    window_group: int
    scan_start: int
    scan_end: int
    collision_energy: float
    mz_center: float
    mz_width: float

    @classmethod
    def from_sql_reader(cls, sql_reader: SqlReader) -> list['SqlQuadSettings']:
        df = sql_reader.read_table('DiaFrameMsMsWindows', _QUAD_COLUMNS)
        return [
            cls(
                window_group=int(row.WindowGroup),
                scan_start=int(row.ScanNumBegin),
                scan_end=int(row.ScanNumEnd),
                collision_energy=float(row.CollisionEnergy),
                mz_center=float(row.IsolationMz),
                mz_width=float(row.IsolationWidth),
            )
            for row in df.itertuples(index=False)
        ]


@dataclass(frozen=True, slots=True)
class SqlPrecursor:
    """
    One row of the DDA Precursors table.

    ``mz`` is the monoisotopic m/z, or the largest-peak m/z when the
    monoisotopic one was not determined.
    """
    id: int
    mz: float
    charge: Optional[int]
    scan_average: float
    intensity: float
    precursor_frame: int

    @classmethod
    def from_sql_reader(cls, sql_reader: SqlReader) -> list['SqlPrecursor']:
        df = sql_reader.read_table(
            'Precursors',
            ['Id', 'LargestPeakMz', 'MonoisotopicMz', 'Charge',
             'ScanNumber', 'Intensity', 'Parent'],
            require_rows=False,
        )
        records = []
        for row in df.itertuples(index=False):
            mz = row.MonoisotopicMz if pd.notna(row.MonoisotopicMz) else row.LargestPeakMz
            charge = int(row.Charge) if pd.notna(row.Charge) and row.Charge > 0 else None
            records.append(cls(
                id=int(row.Id),
                mz=float(mz),
                charge=charge,
                scan_average=float(row.ScanNumber),
                intensity=float(row.Intensity),
                precursor_frame=int(row.Parent),
            ))
        return records


# -----------------------------------------------------------------------------
# Global metadata
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GlobalMetadata:
    """Key/value pairs of the GlobalMetadata table."""
    values: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_sql(cls, sql_reader: SqlReader) -> 'GlobalMetadata':
        df = sql_reader.read_table('GlobalMetadata', ['Key', 'Value'])
        return cls(values={str(k): str(v) for k, v in zip(df['Key'], df['Value'])})

    def get_float(self, key: str) -> float:
        try:
            return float(self.values[key])
        except KeyError as e:
            raise SqlError(f"GlobalMetadata has no key {key!r}") from e
        except ValueError as e:
            raise SqlError(f"GlobalMetadata {key!r} is not numeric: {self.values[key]!r}") from e

    def get_int(self, key: str) -> int:
        return int(self.get_float(key))

    @property
    def mz_min(self) -> float:
        return self.get_float('MzAcqRangeLower')

    @property
    def mz_max(self) -> float:
        return self.get_float('MzAcqRangeUpper')

    @property
    def im_min(self) -> float:
        return self.get_float('OneOverK0AcqRangeLower')

    @property
    def im_max(self) -> float:
        return self.get_float('OneOverK0AcqRangeUpper')

    @property
    def tof_max_index(self) -> int:
        return self.get_int('DigitizerNumSamples')

    @property
    def compression_type(self) -> int:
        """TimsCompressionType; 2 (zstd) when not recorded."""
        if 'TimsCompressionType' not in self.values:
            return 2
        return self.get_int('TimsCompressionType')
