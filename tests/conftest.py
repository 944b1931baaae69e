import os
import random
import sys

import pytest

# Ensure project root is on sys.path for imports when running pytest directly
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from controller.session_controller import SessionObserver, VisualSink
from simulation.interference import EavesdropperInterference, InterferenceRecord
from simulation.photon import BASES, PhotonSample, random_bit


class ScriptedRandom(random.Random):
    """Random source that replays pre-recorded draws, for exact scenarios."""

    def __init__(self, floats=(), choices=(), ints=()):
        super().__init__(0)
        self._floats = list(floats)
        self._choices = list(choices)
        self._ints = list(ints)

    def random(self):
        return self._floats.pop(0)

    def choice(self, seq):
        value = self._choices.pop(0)
        assert value in seq
        return value

    def randint(self, a, b):
        value = self._ints.pop(0)
        assert a <= value <= b
        return value


class AlwaysWrongBasis(EavesdropperInterference):
    """Eavesdropper that always measures in the wrong basis when it intercepts."""

    def apply(self, photon, rng):
        if rng.random() >= self.probability:
            return photon, InterferenceRecord()
        wrong = BASES[1] if photon.basis == BASES[0] else BASES[0]
        collapsed = PhotonSample(
            bit=random_bit(rng),
            basis=photon.basis,
            original_bit=photon.original_bit,
            original_basis=photon.original_basis,
        )
        return collapsed, InterferenceRecord(
            intercepted=True, eve_basis=wrong, basis_match=False, altered=True,
        )


class RecordingSink(VisualSink, SessionObserver):
    """Captures every side effect the session emits, in order."""

    def __init__(self):
        self.calls = []
        self.states = []

    def set_beam_visible(self, visible, color=None):
        self.calls.append(("beam", visible, color))

    def set_hostile_actor_visible(self, visible):
        self.calls.append(("hostile", visible))

    def state_changed(self, state):
        self.states.append(state)

    def log_appended(self, line):
        self.calls.append(("log", line))

    def log_cleared(self):
        self.calls.append(("log_cleared",))

    def visual_calls(self):
        return [c for c in self.calls if c[0] in ("beam", "hostile")]


@pytest.fixture
def rng():
    return random.Random(20240611)


@pytest.fixture
def sink():
    return RecordingSink()
