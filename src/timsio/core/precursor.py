"""
Precursor records for MS2 attribution.

A precursor describes one fragmentation event: which m/z was selected, where
in retention time and ion mobility, and which frame it belongs to. DDA
precursors carry a charge and intensity; DIA precursors are derived from
isolation windows and leave both unset.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Precursor:
    """
    One fragmentation event.

    Attributes:
        mz: Selected (DDA) or isolation-center (DIA) m/z.
        rt: Retention time in seconds.
        im: Ion mobility (1/K0).
        charge: Charge state (None if unknown).
        intensity: Precursor intensity (None if unknown).
        index: Precursor id.
        frame_index: Frame id the precursor refers to.
    """
    mz: float = 0.0
    rt: float = 0.0
    im: float = 0.0
    charge: Optional[int] = None
    intensity: Optional[float] = None
    index: int = 0
    frame_index: int = 0

    @property
    def rt_minutes(self) -> float:
        """Retention time in minutes."""
        return self.rt / 60.0
