"""
CBC padding oracle attack.

Recovers the plaintext of ``IV || C1 || ... || Cn`` using nothing but an
oracle that says whether a forged ciphertext decrypts to valid PKCS#7
padding. The key is never needed; it is only handed back to the oracle.

Algorithm overview, for cipher block ``Ci`` and its predecessor ``Ci-1``:

1. Walk the bytes of ``Ci`` from the last to the first. For position ``j``
   the target padding length is ``block_size - j``.
2. Rewrite the already-recovered tail of ``Ci-1`` so that the tail of the
   decrypted block reads as that padding value.
3. Try every value for byte ``j``. When the oracle accepts, the guess is
   the plaintext byte, since decryption XORs ``D_K(Ci)`` with ``Ci-1``.

A guess for the last byte of a block can be a false positive when the
plaintext already ends in something like ``... 02 ??``: the forged block
then carries valid two-byte padding. That shows up later as a position no
guess satisfies, and the block is restarted from its last byte, resuming
after the false guess.
"""

import enum
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, CancelledError, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional

from .errors import (
    AttackCancelled,
    InvalidConfiguration,
    MalformedInput,
    OracleFailure,
    OracleInconsistency,
)
from .padding import check_block_size

log = logging.getLogger(__name__)

# (key, IV || ciphertext blocks) -> is the padding valid?
Oracle = Callable[[Any, bytes], bool]


def xor(a, b) -> bytes:
    """Return the byte-wise XOR of two equal-length byte sequences."""
    assert len(a) == len(b), "Inputs must be the same length"
    return bytes(x ^ y for x, y in zip(a, b))


class _Phase(enum.Enum):
    SCANNING = "scanning"
    RETRYING = "retrying"


class OracleAttack:
    """
    Padding oracle attack against one CBC ciphertext.

    Parameters
    ----------
    block_size : int
        Cipher block size in bytes, 1..255.
    key : object
        Opaque key handle, passed unchanged to ``oracle``.
    ciphertext : bytes
        IV followed by at least one cipher block. A private copy is kept.
    oracle : callable
        ``oracle(key, data) -> bool``; True when ``data`` (IV followed by
        cipher blocks) decrypts to correctly padded plaintext.
    max_workers : int
        Number of blocks recovered in parallel. The oracle must be thread
        safe when this is larger than 1.
    """

    def __init__(self, block_size: int, key: Any, ciphertext: bytes, oracle: Oracle,
                 *, max_workers: int = 1) -> None:
        check_block_size(block_size)
        if key is None:
            raise InvalidConfiguration("Key cannot be None")
        if ciphertext is None:
            raise InvalidConfiguration("Ciphertext cannot be None")
        if oracle is None or not callable(oracle):
            raise InvalidConfiguration("Oracle must be callable")
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise InvalidConfiguration(f"Invalid worker count: {max_workers}")

        ciphertext = bytes(ciphertext)
        if len(ciphertext) % block_size != 0 or len(ciphertext) // block_size < 2:
            raise MalformedInput(f"Invalid ciphertext size: {len(ciphertext)}")

        self.block_size = block_size
        self.key = key
        self.max_workers = max_workers
        self._ciphertext = ciphertext
        self._oracle = oracle
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self.queries = 0

    @property
    def blocks(self) -> int:
        """Number of cipher blocks to recover, the IV excluded."""
        return len(self._ciphertext) // self.block_size - 1

    def cancel(self) -> None:
        """Abort the run in progress at its next oracle probe."""
        self._cancelled.set()

    def run(self) -> bytes:
        """
        Recover the plaintext, padding bytes included.

        Returns
        -------
        bytes
            ``len(ciphertext) - block_size`` bytes of plaintext. Use
            :func:`padding_oracle.padding.unpad` to strip the padding.
        """
        self._cancelled.clear()
        self.queries = 0
        size = self.block_size
        plaintext = bytearray(len(self._ciphertext) - size)

        log.info("Attacking %d block(s) of %d bytes with %d worker(s)",
                 self.blocks, size, self.max_workers)

        indices = range(1, self.blocks + 1)
        if self.max_workers == 1 or self.blocks == 1:
            for index in indices:
                plaintext[(index - 1) * size:index * size] = self._recover_block(index)
        else:
            for index, block in self._recover_parallel(indices):
                plaintext[(index - 1) * size:index * size] = block

        log.info("Recovered %d bytes with %d oracle queries", len(plaintext), self.queries)
        return bytes(plaintext)

    def _recover_parallel(self, indices):
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self._recover_block, i): i for i in indices}
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            if any(f.exception() is not None for f in done):
                # Stop the siblings at their next probe
                self._cancelled.set()
                for f in pending:
                    f.cancel()
                wait(pending)

        failures = [f for f in futures if not f.cancelled() and f.exception() is not None]
        if failures:
            failures.sort(key=lambda f: (isinstance(f.exception(), AttackCancelled), futures[f]))
            raise failures[0].exception()
        return [(futures[f], f.result()) for f in futures]

    def _recover_block(self, index: int) -> bytes:
        """Recover the plaintext of cipher block ``index`` (1-based)."""
        size = self.block_size
        offset = index * size
        prev = self._ciphertext[offset - size:offset]
        # Working copy ends at the target block; only its predecessor is forged
        work = bytearray(self._ciphertext[:offset + size])
        plain = bytearray(size)

        phase = _Phase.SCANNING
        position = size - 1
        start = 0
        while position >= 0:
            target = size - position

            # Pin the recovered tail to decrypt as `target`
            tail = size - position - 1
            if tail:
                work[offset - size + position + 1:offset] = xor(
                    xor(prev[position + 1:], plain[position + 1:]), bytes([target]) * tail)

            guess = self._probe(work, index, position, start, prev[position])
            if guess is None:
                if position == size - 1 or phase is _Phase.RETRYING:
                    raise OracleInconsistency("No guess produced valid padding", index, position)

                # The last byte was a false positive; resume after it
                phase = _Phase.RETRYING
                start = plain[size - 1] + 1
                log.debug("Block %d: no valid guess at byte %d, restarting from byte %d at guess %d",
                          index, position, size - 1, start)
                position = size - 1
                work[offset - size:offset] = prev
                continue

            plain[position] = guess
            log.debug("Block %d byte %d: pad=%d guess=%02x", index, position, target, guess)
            start = 0
            position -= 1

        log.info("Recovered block %d: %r", index, bytes(plain))
        return bytes(plain)

    def _probe(self, work: bytearray, index: int, position: int, start: int,
               original: int) -> Optional[int]:
        """Return the first guess from ``start`` the oracle accepts at ``position``."""
        size = self.block_size
        at = index * size - size + position
        target = size - position

        for guess in range(start, 0x100):
            work[at] = original ^ guess ^ target
            if self._query(work, index, position):
                if position == size - 1 and size == 2 and not self._confirm(work, index, position):
                    continue
                return guess
        return None

    def _confirm(self, work: bytearray, index: int, position: int) -> bool:
        """
        Check that a hit on the last byte is one byte of padding.

        With two-byte blocks a false positive on the last byte is never
        followed by an impossible position, so it has to be caught here by
        changing the byte before it and asking again.
        """
        at = index * self.block_size - self.block_size + position - 1
        saved = work[at]
        work[at] ^= 0x01
        try:
            return self._query(work, index, position)
        finally:
            work[at] = saved

    def _query(self, work: bytearray, index: int, position: int) -> bool:
        if self._cancelled.is_set():
            raise AttackCancelled("Attack cancelled", index, position)
        with self._lock:
            self.queries += 1
        try:
            result = self._oracle(self.key, bytes(work))
        except CancelledError as exc:
            raise AttackCancelled("Oracle call cancelled", index, position) from exc
        except Exception as exc:
            if self._cancelled.is_set():
                raise AttackCancelled("Attack cancelled", index, position) from exc
            raise OracleFailure("Oracle raised an exception", index, position) from exc
        if self._cancelled.is_set():
            raise AttackCancelled("Attack cancelled", index, position)
        return bool(result)
