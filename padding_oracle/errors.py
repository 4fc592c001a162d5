"""
Exceptions raised by the padding codec and the padding oracle attack.

Every error derives from :class:`PaddingOracleError`. The input validation
errors also derive from ``ValueError``, matching how pycryptodome's
``Crypto.Util.Padding.unpad`` reports bad padding, so oracles written
against either codec can catch ``ValueError``.
"""

from typing import Optional


class PaddingOracleError(Exception):
    """Base class for all errors raised by this package."""


class InvalidConfiguration(PaddingOracleError, ValueError):
    """A block size outside 1..255, or a missing required input."""


class MalformedInput(PaddingOracleError, ValueError):
    """Data whose length is not block aligned, or a ciphertext that is too short."""


class InvalidPadding(PaddingOracleError, ValueError):
    """The trailing PKCS#7 padding bytes are not well formed."""


class AttackError(PaddingOracleError):
    """
    An error that stopped a running attack.

    Attributes
    ----------
    block : int or None
        Index of the cipher block being recovered (the IV is block 0).
    position : int or None
        Byte offset inside that block that was being probed.
    """

    def __init__(self, message: str, block: Optional[int] = None,
                 position: Optional[int] = None) -> None:
        if block is not None:
            message = f"{message} (block {block}, byte {position})"
        super().__init__(message)
        self.block = block
        self.position = position


class OracleFailure(AttackError):
    """The oracle raised while being queried; the original error is ``__cause__``."""


class OracleInconsistency(AttackError):
    """The oracle answers cannot come from a correct padding check."""


class AttackCancelled(AttackError):
    """The attack was cancelled before the probe in flight was recorded."""
