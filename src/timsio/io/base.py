from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import ClassVar, Optional

from ..core import Frame, FrameType, Precursor
from ..utils.parallel import parallel_map


class FrameReader(ABC):
    """
    Abstract base class for frame readers.

    Subclasses decode single frames; the batch reads here fan
    :meth:`read_single_frame` out over ``n_workers`` threads.
    """

    # Class-level attributes
    vendor: ClassVar[str]  # e.g., "Bruker"
    supported_extensions: ClassVar[list[str]]  # e.g., [".d"]

    n_workers: int = 1

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._validate_path()

    def _validate_path(self) -> None:
        """Validate file/folder exists and has correct extension."""
        if not self.path.exists():
            raise FileNotFoundError(f"File not found: {self.path}")

        suffix = self.path.suffix.lower()
        if suffix not in self.supported_extensions:
            raise ValueError(
                f"Unsupported extension {suffix} for {self.vendor} reader. "
                f"Expected: {self.supported_extensions}"
            )

    def __enter__(self) -> 'FrameReader':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass

    @abstractmethod
    def __len__(self) -> int:
        """Total number of frames."""
        ...

    @property
    @abstractmethod
    def frame_types(self) -> list[FrameType]:
        """Frame type of every frame position."""
        ...

    @abstractmethod
    def read_single_frame(self, index: int) -> Frame:
        """Random access to the frame at a position."""
        ...

    def read_all_frames(self) -> list[Frame]:
        """Read every frame, in position order."""
        return parallel_map(self.read_single_frame, range(len(self)), self.n_workers)

    def read_all_ms1_frames(self) -> list[Frame]:
        """
        Read MS1 frames.

        The result has one slot per frame position; non-MS1 positions hold
        the empty ``Frame()`` sentinel.
        """
        return self._read_matching(lambda frame_type: frame_type.is_ms1)

    def read_all_ms2_frames(self) -> list[Frame]:
        """
        Read MS2 frames.

        The result has one slot per frame position; non-MS2 positions hold
        the empty ``Frame()`` sentinel.
        """
        return self._read_matching(lambda frame_type: frame_type.is_ms2)

    def _read_matching(self, predicate) -> list[Frame]:
        frame_types = self.frame_types

        def read(index: int) -> Frame:
            if predicate(frame_types[index]):
                return self.read_single_frame(index)
            return Frame()

        return parallel_map(read, range(len(self)), self.n_workers)

    def iter_frames(self) -> Iterator[Frame]:
        """Iterate over frames one at a time, in position order."""
        for index in range(len(self)):
            yield self.read_single_frame(index)

    def get_frame_type_counts(self) -> dict[FrameType, int]:
        """Return count of frames per frame type."""
        counts: dict[FrameType, int] = {}
        for frame_type in self.frame_types:
            counts[frame_type] = counts.get(frame_type, 0) + 1
        return counts


class PrecursorReaderBackend(ABC):
    """
    Indexed access to the precursors of a run.

    Backends are immutable after construction, so ``get`` may be called from
    several threads at once.
    """

    @abstractmethod
    def get(self, index: int) -> Optional[Precursor]:
        """Precursor at ``index``, or None if out of range."""
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Number of precursors."""
        ...
