"""
Per-bit comparison and full round outcome dataclasses.
"""
from dataclasses import dataclass
from typing import Tuple

from .photon import PhotonSample


@dataclass(frozen=True)
class ComparisonResult:
    """Agreement of one sifted bit pair."""
    match: bool


@dataclass(frozen=True)
class RoundOutcome:
    """Everything one BB84 round produced. Never mutated after it is returned."""
    sender: Tuple[PhotonSample, ...] = ()
    receiver: Tuple[PhotonSample, ...] = ()
    sifted_sender: Tuple[PhotonSample, ...] = ()
    sifted_receiver: Tuple[PhotonSample, ...] = ()
    comparison_results: Tuple[ComparisonResult, ...] = ()
    error_rate: float = 0.0          # percentage, 0..100, as reported
    is_secure: bool = True

    # Diagnostics
    raw_error_rate: float = 0.0      # disagreement before correction
    intercepted_count: int = 0
    protected: bool = False
    eve_active: bool = False

    @property
    def photon_count(self) -> int:
        return len(self.sender)

    @property
    def sifted_count(self) -> int:
        return len(self.sifted_sender)

    @property
    def error_count(self) -> int:
        return sum(1 for c in self.comparison_results if not c.match)

    @property
    def sifted_key(self) -> Tuple[int, ...]:
        """Receiver-side sifted bits."""
        return tuple(p.bit for p in self.sifted_receiver)
