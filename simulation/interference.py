"""
interference.py
===============
Eavesdropper model for the vehicle link.

A hostile drone sits on the quantum channel and, for a fixed fraction of the
photons, measures in a randomly chosen basis:

  - wrong basis  → the photon collapses and continues carrying a fresh random bit
  - right basis  → the photon passes through untouched

Each call exposes:
  - apply(photon, rng) -> (photon_out, InterferenceRecord)
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from .photon import PhotonSample, random_basis, random_bit


EVE_INTERFERENCE_PROBABILITY = 0.7


@dataclass
class InterferenceRecord:
    """What the eavesdropper did to a single photon."""
    intercepted: bool = False
    eve_basis: Optional[str] = None
    basis_match: bool = False       # whether Eve guessed the sender's basis
    altered: bool = False           # transmitted bit was re-drawn


class EavesdropperInterference:
    """
    Intercept model used by the protocol engine.

    Only the carried bit can change; the photon keeps the sender's basis,
    so the receiver's basis comparison is still made against the sender.
    """

    def __init__(self, probability: float = EVE_INTERFERENCE_PROBABILITY):
        """
        Args:
            probability: Fraction of photons the eavesdropper touches [0, 1].
        """
        self.probability = max(0.0, min(1.0, probability))

    def apply(self, photon: PhotonSample, rng: random.Random) -> Tuple[PhotonSample, InterferenceRecord]:
        """
        Returns the photon as it continues down the channel and a record.
        If the eavesdropper leaves it alone, the same object is returned.
        """
        rec = InterferenceRecord()

        if rng.random() >= self.probability:
            return photon, rec

        rec.intercepted = True
        rec.eve_basis = random_basis(rng)
        rec.basis_match = rec.eve_basis == photon.basis

        if rec.basis_match:
            return photon, rec

        rec.altered = True
        collapsed = PhotonSample(
            bit=random_bit(rng),
            basis=photon.basis,
            original_bit=photon.original_bit,
            original_basis=photon.original_basis,
        )
        return collapsed, rec
