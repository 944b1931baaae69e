"""
PhotonSample: one quantum bit exchanged between the two vehicles.

Polarization map:
  Rectilinear (+) basis:  0° = bit 0,  90° = bit 1
  Diagonal    (×) basis: 45° = bit 0, 135° = bit 1
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional


RECTILINEAR = '+'
DIAGONAL = 'x'
BASES = (RECTILINEAR, DIAGONAL)

BASIS_NAMES = {
    RECTILINEAR: "rectilinear",
    DIAGONAL:    "diagonal",
}

# Colours used by the link canvas and the key-status strip
POLARIZATION_COLOURS = {
    0.0:   "#74b9ff",   # →  blue
    90.0:  "#ff7675",   # ↑  red
    45.0:  "#55efc4",   # ↗  green
    135.0: "#fdcb6e",   # ↖  orange
}

POLARIZATION_SYMBOLS = {
    0.0:   "→",
    90.0:  "↑",
    45.0:  "↗",
    135.0: "↖",
}


def random_bit(rng: random.Random) -> int:
    return rng.randint(0, 1)


def random_basis(rng: random.Random) -> str:
    return rng.choice(BASES)


@dataclass(frozen=True)
class PhotonSample:
    """
    A single photon as seen by one party.

    For the sender, ``original_bit``/``original_basis`` are what was encoded.
    For the receiver they are the measurement basis and the measured bit.
    ``basis_match`` stays None until sifting returns an annotated copy.
    """
    bit: int
    basis: str
    original_bit: int
    original_basis: str
    basis_match: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.bit not in (0, 1) or self.original_bit not in (0, 1):
            raise ValueError("Bit must be 0 or 1")
        if self.basis not in BASES or self.original_basis not in BASES:
            raise ValueError("Basis must be '+' or 'x'")

    # ------------------------------------------------------------------ #
    #  Factories                                                           #
    # ------------------------------------------------------------------ #
    @classmethod
    def prepare(cls, bit: int, basis: str) -> "PhotonSample":
        """A freshly encoded photon: current and original values agree."""
        return cls(bit=bit, basis=basis, original_bit=bit, original_basis=basis)

    @classmethod
    def random(cls, rng: random.Random) -> "PhotonSample":
        """Creates a photon with a random bit and a random basis."""
        bit = random_bit(rng)
        basis = random_basis(rng)
        return cls.prepare(bit, basis)

    # ------------------------------------------------------------------ #
    #  Measurement                                                         #
    # ------------------------------------------------------------------ #
    def measure(self, measurement_basis: str, rng: random.Random) -> int:
        """
        Returns the bit observed when measuring in *measurement_basis*.

        Matching basis reads the carried bit back; a wrong basis yields a
        uniformly random outcome.
        """
        if self.basis == measurement_basis:
            return self.bit
        return random_bit(rng)

    # ------------------------------------------------------------------ #
    #  Properties                                                          #
    # ------------------------------------------------------------------ #
    @property
    def basis_name(self) -> str:
        return BASIS_NAMES[self.basis]

    @property
    def polarization(self) -> float:
        return polarization_of(self.bit, self.basis)

    @property
    def colour(self) -> str:
        return POLARIZATION_COLOURS.get(self.polarization, "#ffffff")

    @property
    def symbol(self) -> str:
        return POLARIZATION_SYMBOLS.get(self.polarization, "?")

    def __repr__(self) -> str:
        return (
            f"PhotonSample(bit={self.bit}, basis='{self.basis}', "
            f"original=({self.original_bit}, '{self.original_basis}'), "
            f"match={self.basis_match}, {self.symbol})"
        )


def polarization_of(bit: int, basis: str) -> float:
    if basis == RECTILINEAR:
        return 0.0 if bit == 0 else 90.0
    return 45.0 if bit == 0 else 135.0
