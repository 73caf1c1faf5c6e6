from pathlib import Path
from enum import Enum, auto

from .sql import TDF_FILE_NAME


class RawFormat(Enum):
    TDF = auto()        # analysis.tdf + analysis.tdf_bin
    MINITDF = auto()    # parquet companion files
    UNKNOWN = auto()


# Extension to format mapping
FORMAT_EXTENSIONS: dict[str, RawFormat] = {
    '.tdf': RawFormat.TDF,
    '.parquet': RawFormat.MINITDF,
}


def detect_format(path: Path | str) -> RawFormat:
    """
    Detect the on-disk format from a path.

    ``.d`` folders need content inspection: only folders holding an
    ``analysis.tdf`` store are TDF, or paths that do not exist yet
    (opening them then fails on the missing store).
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == '.d':
        return _detect_d_folder_format(path)

    return FORMAT_EXTENSIONS.get(suffix, RawFormat.UNKNOWN)


def _detect_d_folder_format(path: Path) -> RawFormat:
    """
    Distinguish timsTOF .d folders from other vendors' .d folders.

    A missing .d path is treated as TDF so that opening it reports the
    missing metadata store.
    """
    if not path.exists():
        return RawFormat.TDF
    if path.is_dir() and (path / TDF_FILE_NAME).exists():
        return RawFormat.TDF
    return RawFormat.UNKNOWN
