from .photon import (
    PhotonSample,
    RECTILINEAR,
    DIAGONAL,
    BASES,
    BASIS_NAMES,
    POLARIZATION_COLOURS,
    POLARIZATION_SYMBOLS,
)
from .interference import (
    EavesdropperInterference,
    InterferenceRecord,
    EVE_INTERFERENCE_PROBABILITY,
)
from .round_result import ComparisonResult, RoundOutcome
from .bb84 import (
    BB84Protocol,
    InvalidArgumentError,
    run_round,
    SECURITY_THRESHOLD,
    CORRECTION_NOTICE_THRESHOLD,
    DEFAULT_PHOTON_COUNT,
)
