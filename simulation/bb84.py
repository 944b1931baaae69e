"""
BB84Protocol: simulates one key-establishment round between the two vehicles.

A round is a pure function of its inputs and the random source:
  1. _process_photon(): sender encodes, eavesdropper may interfere, receiver measures
  2. sifting:           keep only the indices where both bases agree
  3. _verify():         compute the error rate and the security verdict

The optional *on_photon* callback is invoked once per photon so a front-end
can pace an animation; it has no influence on the outcome.
"""
import random
from dataclasses import replace
from typing import Callable, List, Optional, Sequence, Tuple

from .interference import EVE_INTERFERENCE_PROBABILITY, EavesdropperInterference
from .photon import PhotonSample, random_basis
from .round_result import ComparisonResult, RoundOutcome


SECURITY_THRESHOLD = 10.0            # %, unprotected link is secure at or below this
CORRECTION_NOTICE_THRESHOLD = 5.0    # %, raw interference worth reporting in protected mode
DEFAULT_PHOTON_COUNT = 40

PhotonCallback = Callable[[int, PhotonSample, PhotonSample], None]


class InvalidArgumentError(ValueError):
    """Raised for malformed round parameters (e.g. a negative photon count)."""


class BB84Protocol:
    """BB84 round generator bound to a photon count and a random source."""

    def __init__(
        self,
        photon_count: int = DEFAULT_PHOTON_COUNT,
        rng: Optional[random.Random] = None,
        interference: Optional[EavesdropperInterference] = None,
    ):
        _check_photon_count(photon_count)
        self.photon_count = photon_count
        self.rng = rng if rng is not None else random.Random()
        self.interference = interference or EavesdropperInterference(EVE_INTERFERENCE_PROBABILITY)

    # ------------------------------------------------------------------ #
    #  Full round                                                          #
    # ------------------------------------------------------------------ #
    def run_round(
        self,
        eve_active: bool,
        protected: bool,
        on_photon: Optional[PhotonCallback] = None,
    ) -> RoundOutcome:
        """Runs one complete round and returns its immutable outcome."""
        sender: List[PhotonSample] = []
        receiver: List[PhotonSample] = []
        intercepted = 0

        for idx in range(self.photon_count):
            sent, measured, touched = self._process_photon(eve_active)
            sender.append(sent)
            receiver.append(measured)
            intercepted += touched
            if on_photon is not None:
                on_photon(idx, sent, measured)

        sender, receiver = _annotate(sender, receiver)
        sifted_sender = tuple(p for p in sender if p.basis_match)
        sifted_receiver = tuple(p for p in receiver if p.basis_match)

        raw_rate, raw_results = _verify(sifted_sender, sifted_receiver)

        if protected:
            # Error correction / privacy amplification repair everything
            comparison = tuple(ComparisonResult(match=True) for _ in raw_results)
            error_rate = 0.0
            is_secure = True
        else:
            comparison = raw_results
            error_rate = raw_rate
            is_secure = error_rate <= SECURITY_THRESHOLD

        return RoundOutcome(
            sender=tuple(sender),
            receiver=tuple(receiver),
            sifted_sender=sifted_sender,
            sifted_receiver=sifted_receiver,
            comparison_results=comparison,
            error_rate=error_rate,
            is_secure=is_secure,
            raw_error_rate=raw_rate,
            intercepted_count=intercepted,
            protected=protected,
            eve_active=eve_active,
        )

    # ------------------------------------------------------------------ #
    #  Internal: per-photon processing                                     #
    # ------------------------------------------------------------------ #
    def _process_photon(self, eve_active: bool) -> Tuple[PhotonSample, PhotonSample, bool]:
        rng = self.rng
        sent = PhotonSample.random(rng)

        transmitted = sent
        touched = False
        if eve_active:
            transmitted, record = self.interference.apply(sent, rng)
            touched = record.intercepted

        bob_basis = random_basis(rng)
        bob_bit = transmitted.measure(bob_basis, rng)

        measured = PhotonSample.prepare(bob_bit, bob_basis)
        return sent, measured, touched


# ------------------------------------------------------------------ #
#  Pure functions                                                      #
# ------------------------------------------------------------------ #
def run_round(
    eve_active: bool,
    protected: bool,
    photon_count: int = DEFAULT_PHOTON_COUNT,
    rng: Optional[random.Random] = None,
    on_photon: Optional[PhotonCallback] = None,
) -> RoundOutcome:
    """Convenience wrapper: one round with a throw-away BB84Protocol."""
    return BB84Protocol(photon_count, rng).run_round(eve_active, protected, on_photon)


def _check_photon_count(photon_count) -> None:
    if isinstance(photon_count, bool) or not isinstance(photon_count, int):
        raise InvalidArgumentError(f"photon_count must be an integer, got {photon_count!r}")
    if photon_count < 0:
        raise InvalidArgumentError(f"photon_count must be non-negative, got {photon_count}")


def _annotate(
    sender: Sequence[PhotonSample],
    receiver: Sequence[PhotonSample],
) -> Tuple[List[PhotonSample], List[PhotonSample]]:
    matches = [a.original_basis == b.original_basis for a, b in zip(sender, receiver)]
    return (
        [replace(p, basis_match=m) for p, m in zip(sender, matches)],
        [replace(p, basis_match=m) for p, m in zip(receiver, matches)],
    )


def _verify(
    sifted_sender: Sequence[PhotonSample],
    sifted_receiver: Sequence[PhotonSample],
) -> Tuple[float, Tuple[ComparisonResult, ...]]:
    """Returns (raw error rate in %, true per-bit comparison)."""
    results = tuple(
        ComparisonResult(match=a.original_bit == b.bit)
        for a, b in zip(sifted_sender, sifted_receiver)
    )
    if not results:
        return 0.0, results
    errors = sum(1 for r in results if not r.match)
    return errors / len(results) * 100, results
