"""Tests for the BB84 round engine and the eavesdropper model."""
import dataclasses
import random

import pytest

from simulation.bb84 import (
    DEFAULT_PHOTON_COUNT,
    SECURITY_THRESHOLD,
    BB84Protocol,
    InvalidArgumentError,
    run_round,
)
from simulation.interference import EavesdropperInterference
from simulation.photon import DIAGONAL, RECTILINEAR, PhotonSample
from tests.conftest import AlwaysWrongBasis, ScriptedRandom


MODES = [(False, False), (False, True), (True, False), (True, True)]


@pytest.mark.parametrize("eve_active,protected", MODES)
@pytest.mark.parametrize("seed", [1, 2, 3])
def test_sifting_keeps_exactly_the_agreeing_indices(eve_active, protected, seed):
    outcome = run_round(eve_active, protected, rng=random.Random(seed))

    assert outcome.photon_count == DEFAULT_PHOTON_COUNT
    assert len(outcome.receiver) == DEFAULT_PHOTON_COUNT
    agreeing = [
        i for i, (s, r) in enumerate(zip(outcome.sender, outcome.receiver))
        if s.original_basis == r.original_basis
    ]
    assert outcome.sifted_count == len(agreeing)
    assert len(outcome.sifted_receiver) == len(agreeing)
    assert len(outcome.comparison_results) == len(agreeing)
    assert list(outcome.sifted_sender) == [outcome.sender[i] for i in agreeing]
    assert list(outcome.sifted_receiver) == [outcome.receiver[i] for i in agreeing]


def test_every_sample_is_annotated_with_its_basis_match(rng):
    outcome = run_round(True, False, photon_count=60, rng=rng)

    for s, r in zip(outcome.sender, outcome.receiver):
        assert s.basis_match is not None
        assert s.basis_match == r.basis_match == (s.original_basis == r.original_basis)
        assert r.bit == r.original_bit
        assert r.basis == r.original_basis


@pytest.mark.parametrize("eve_active", [False, True])
@pytest.mark.parametrize("seed", range(5))
def test_protected_round_is_always_secure(eve_active, seed):
    outcome = run_round(eve_active, True, rng=random.Random(seed))

    assert outcome.error_rate == 0.0
    assert outcome.is_secure is True
    assert all(c.match for c in outcome.comparison_results)
    assert outcome.protected is True


@pytest.mark.parametrize("eve_active", [False, True])
@pytest.mark.parametrize("seed", range(10))
def test_unprotected_verdict_follows_the_threshold(eve_active, seed):
    outcome = run_round(eve_active, False, rng=random.Random(seed))

    assert outcome.is_secure == (outcome.error_rate <= SECURITY_THRESHOLD)
    assert outcome.error_rate == outcome.raw_error_rate
    if outcome.sifted_count:
        expected = outcome.error_count / outcome.sifted_count * 100
        assert outcome.error_rate == pytest.approx(expected)


def test_unprotected_without_eavesdropper_has_no_errors(rng):
    outcome = run_round(False, False, photon_count=500, rng=rng)

    assert outcome.error_rate == 0.0
    assert outcome.is_secure
    assert outcome.intercepted_count == 0


def test_zero_photons_yields_empty_secure_round():
    outcome = run_round(True, False, photon_count=0, rng=random.Random(0))

    assert outcome.sender == ()
    assert outcome.sifted_sender == ()
    assert outcome.comparison_results == ()
    assert outcome.error_rate == 0.0
    assert outcome.is_secure


@pytest.mark.parametrize("bad", [-1, -40, 2.5, "40", None, True])
def test_malformed_photon_count_is_rejected(bad):
    with pytest.raises(InvalidArgumentError):
        BB84Protocol(photon_count=bad)


def test_invalid_argument_error_is_a_value_error():
    with pytest.raises(ValueError):
        run_round(False, True, photon_count=-3)


def test_same_seed_gives_identical_rounds():
    first = run_round(True, False, rng=random.Random(99))
    second = run_round(True, False, rng=random.Random(99))

    assert first == second


def test_photon_callback_sees_every_photon_without_changing_the_outcome():
    seen = []

    def on_photon(idx, sent, measured):
        seen.append((idx, sent.original_bit, measured.original_basis))

    paced = run_round(True, False, rng=random.Random(5), on_photon=on_photon)
    plain = run_round(True, False, rng=random.Random(5))

    assert [s[0] for s in seen] == list(range(DEFAULT_PHOTON_COUNT))
    assert paced == plain
    assert [s[1] for s in seen] == [p.original_bit for p in plain.sender]


def test_outcome_is_immutable(rng):
    outcome = run_round(False, True, rng=rng)

    with pytest.raises(dataclasses.FrozenInstanceError):
        outcome.error_rate = 50.0


# ------------------------------------------------------------------ #
#  Exact scripted scenarios                                            #
# ------------------------------------------------------------------ #
def test_intercepted_photon_measured_in_wrong_basis_flips_the_sifted_bit():
    rng = ScriptedRandom(
        floats=[0.1],                                   # intercept
        choices=[RECTILINEAR, DIAGONAL, RECTILINEAR],   # sender, eve, receiver
        ints=[1, 0],                                    # sender bit, collapsed bit
    )
    outcome = BB84Protocol(photon_count=1, rng=rng).run_round(eve_active=True, protected=False)

    assert outcome.sifted_count == 1
    assert outcome.sifted_key == (0,)
    assert outcome.error_rate == 100.0
    assert not outcome.is_secure
    assert outcome.intercepted_count == 1


def test_receiver_basis_mismatch_draws_random_bit_and_drops_the_index():
    rng = ScriptedRandom(choices=[DIAGONAL, RECTILINEAR], ints=[0, 1])
    outcome = BB84Protocol(photon_count=1, rng=rng).run_round(eve_active=False, protected=False)

    assert outcome.receiver[0].bit == 1
    assert outcome.receiver[0].basis_match is False
    assert outcome.sifted_count == 0
    assert outcome.is_secure


# ------------------------------------------------------------------ #
#  Statistical behaviour                                               #
# ------------------------------------------------------------------ #
def test_default_eavesdropper_corrupts_about_seventeen_percent():
    outcome = run_round(True, False, photon_count=4000, rng=random.Random(2024))

    assert 13.0 < outcome.error_rate < 22.0
    assert not outcome.is_secure
    assert 0.65 * 4000 < outcome.intercepted_count < 0.75 * 4000


def test_always_wrong_basis_eavesdropper_corrupts_about_thirty_five_percent():
    protocol = BB84Protocol(
        photon_count=4000,
        rng=random.Random(7),
        interference=AlwaysWrongBasis(0.7),
    )
    outcome = protocol.run_round(eve_active=True, protected=False)

    assert 30.0 < outcome.error_rate < 40.0
    assert not outcome.is_secure


def test_protected_round_keeps_raw_interference_as_diagnostic():
    protocol = BB84Protocol(
        photon_count=2000,
        rng=random.Random(11),
        interference=AlwaysWrongBasis(0.7),
    )
    outcome = protocol.run_round(eve_active=True, protected=True)

    assert outcome.error_rate == 0.0
    assert outcome.raw_error_rate > 25.0


# ------------------------------------------------------------------ #
#  Eavesdropper model                                                  #
# ------------------------------------------------------------------ #
def test_interference_skips_photon_above_probability():
    photon = PhotonSample.prepare(1, RECTILINEAR)
    out, record = EavesdropperInterference(0.7).apply(photon, ScriptedRandom(floats=[0.7]))

    assert out is photon
    assert record.intercepted is False


def test_interference_with_matching_basis_leaves_photon_untouched():
    photon = PhotonSample.prepare(1, DIAGONAL)
    rng = ScriptedRandom(floats=[0.2], choices=[DIAGONAL])
    out, record = EavesdropperInterference(0.7).apply(photon, rng)

    assert out is photon
    assert record.intercepted and record.basis_match
    assert not record.altered


def test_interference_with_wrong_basis_redraws_the_bit_only():
    photon = PhotonSample.prepare(1, RECTILINEAR)
    rng = ScriptedRandom(floats=[0.2], choices=[DIAGONAL], ints=[0])
    out, record = EavesdropperInterference(0.7).apply(photon, rng)

    assert record.altered and record.eve_basis == DIAGONAL
    assert out.bit == 0
    assert out.basis == RECTILINEAR
    assert (out.original_bit, out.original_basis) == (1, RECTILINEAR)


def test_interference_probability_is_clamped():
    assert EavesdropperInterference(1.5).probability == 1.0
    assert EavesdropperInterference(-0.2).probability == 0.0


def test_photon_sample_validates_values():
    with pytest.raises(ValueError):
        PhotonSample.prepare(2, RECTILINEAR)
    with pytest.raises(ValueError):
        PhotonSample.prepare(0, "?")


def test_polarization_symbols():
    assert PhotonSample.prepare(0, RECTILINEAR).polarization == 0.0
    assert PhotonSample.prepare(1, RECTILINEAR).symbol == "↑"
    assert PhotonSample.prepare(0, DIAGONAL).polarization == 45.0
    assert PhotonSample.prepare(1, DIAGONAL).basis_name == "diagonal"


def test_measure_in_matching_basis_reads_the_carried_bit():
    collapsed = PhotonSample(bit=0, basis=DIAGONAL, original_bit=1, original_basis=DIAGONAL)
    assert collapsed.measure(DIAGONAL, ScriptedRandom()) == 0


def test_measure_in_wrong_basis_draws_a_random_bit():
    photon = PhotonSample.prepare(1, RECTILINEAR)
    assert photon.measure(DIAGONAL, ScriptedRandom(ints=[0])) == 0


def test_receiver_reads_through_photon_measure(monkeypatch):
    seen = []
    original = PhotonSample.measure

    def spy(self, basis, rng):
        seen.append((self.basis, basis))
        return original(self, basis, rng)

    monkeypatch.setattr(PhotonSample, "measure", spy)
    run_round(False, False, photon_count=5, rng=random.Random(4))

    assert len(seen) == 5
