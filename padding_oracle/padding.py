"""
PKCS#7 padding.

Every padding byte holds the number of padding bytes appended, and at least
one byte is always appended, so data that is already block aligned gets a
full extra block of padding.
"""

from .errors import InvalidConfiguration, InvalidPadding, MalformedInput


def check_block_size(block_size: int) -> int:
    """Validate a block size; it must fit in a single padding byte."""
    if isinstance(block_size, bool) or not isinstance(block_size, int):
        raise InvalidConfiguration(f"Block size must be an int, got {type(block_size).__name__}")
    if not 1 <= block_size <= 0xFF:
        raise InvalidConfiguration(f"Invalid block size: {block_size}")
    return block_size


def pad(data: bytes, block_size: int) -> bytes:
    """Append PKCS#7 padding so the result is a multiple of ``block_size``."""
    if data is None:
        raise InvalidConfiguration("Data cannot be None")
    check_block_size(block_size)

    pad_len = block_size - (len(data) % block_size)
    return bytes(data) + bytes([pad_len]) * pad_len


def unpad(data: bytes, block_size: int) -> bytes:
    """
    Strip PKCS#7 padding.

    Raises
    ------
    MalformedInput
        If ``data`` is not a multiple of ``block_size`` long.
    InvalidPadding
        If the last byte is zero, larger than the block size or the data,
        or any of the trailing padding bytes differs from it.
    """
    if data is None:
        raise InvalidConfiguration("Data cannot be None")
    check_block_size(block_size)
    if len(data) % block_size != 0:
        raise MalformedInput(f"Invalid data size: {len(data)} is not a multiple of {block_size}")
    if not data:
        raise InvalidPadding("No padding bytes")

    pad_len = data[-1]
    if pad_len == 0:
        raise InvalidPadding("No padding bytes")
    if pad_len > block_size or pad_len > len(data):
        raise InvalidPadding(f"Padding length 0x{pad_len:02X} out of range")

    for b in data[-pad_len:]:
        if b != pad_len:
            raise InvalidPadding(f"Expected 0x{pad_len:02X}, but found 0x{b:02X}")
    return bytes(data[:-pad_len])
