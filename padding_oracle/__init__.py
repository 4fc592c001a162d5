"""CBC padding oracle attack and PKCS#7 padding."""

from .attack import Oracle, OracleAttack
from .demo_oracle import BLOCKSIZE, DemoOracle
from .errors import (
    AttackCancelled,
    AttackError,
    InvalidConfiguration,
    InvalidPadding,
    MalformedInput,
    OracleFailure,
    OracleInconsistency,
    PaddingOracleError,
)
from .padding import pad, unpad

__version__ = "1.0.0"

__all__ = [
    "AttackCancelled",
    "AttackError",
    "BLOCKSIZE",
    "DemoOracle",
    "InvalidConfiguration",
    "InvalidPadding",
    "MalformedInput",
    "Oracle",
    "OracleAttack",
    "OracleFailure",
    "OracleInconsistency",
    "PaddingOracleError",
    "pad",
    "unpad",
]
