"""
Demo "padding oracle" used for education and for exercising the attack.

This module exposes:
- BLOCKSIZE: the default block size (16 bytes, AES).
- DemoOracle: a deliberately vulnerable CBC decryptor with these operations:
    * generate_key() -> bytes
        - A fresh random key for the configured cipher.
    * encrypt(key, plaintext, iv=None) -> bytes
        - PKCS#7 pads the plaintext and encrypts it in CBC mode, returning
          IV || ciphertext.
    * decrypt_check(key, data) -> (plain: bytes, valid_padding: bool)
        - Decrypts IV || ciphertext and reports whether the padding is valid.
    * __call__(key, data) -> bool
        - The oracle itself: only the padding verdict. This is the callable
          handed to OracleAttack.

Notes / Security:
- This module is intentionally vulnerable. Use it only for education,
  testing, and demonstrations.
- For real cryptographic use, never expose padding check results to
  untrusted callers and always use authenticated encryption (e.g., AES-GCM)
  or apply an encrypt-then-MAC scheme.
"""

import os
import threading
from typing import Optional, Tuple

# pip install pycryptodome
from Crypto.Cipher import AES, DES3

from .errors import InvalidConfiguration, InvalidPadding, MalformedInput
from .padding import pad, unpad

# AES block size in bytes (16 bytes for AES)
BLOCKSIZE: int = AES.block_size

CIPHERS = {
    "aes": AES,
    "des3": DES3,
}


class DemoOracle:
    """
    A minimal padding oracle for demonstration.

    Attributes
    ----------
    cipher : module
        The pycryptodome cipher module, ``Crypto.Cipher.AES`` or
        ``Crypto.Cipher.DES3``.
    block_size : int
        Block size of that cipher (16 for AES, 8 for DES3).
    queries : int
        Number of times the oracle has been asked about padding.
    """

    def __init__(self, cipher=AES) -> None:
        if cipher not in CIPHERS.values():
            raise InvalidConfiguration(f"Unsupported cipher: {cipher!r}")
        self.cipher = cipher
        self.block_size: int = cipher.block_size
        self.queries: int = 0
        self._lock = threading.Lock()

    def generate_key(self) -> bytes:
        """
        Return a random secret key for the configured cipher.

        AES gets a 128-bit key. DES3 gets a three-key 192-bit key with the
        parity bits fixed up, as pycryptodome requires.
        """
        if self.cipher is DES3:
            while True:
                try:
                    return DES3.adjust_key_parity(os.urandom(24))
                except ValueError:
                    # Degenerated to single DES; draw again
                    continue
        return os.urandom(BLOCKSIZE)

    def encrypt(self, key: bytes, plaintext: bytes, iv: Optional[bytes] = None) -> bytes:
        """
        Encrypt bytes under CBC mode with PKCS#7 padding.

        Parameters
        ----------
        key : bytes
            Secret key for the cipher.
        plaintext : bytes
            Message to encrypt.
        iv : bytes, optional
            Initialization vector; a fresh random one when omitted.

        Returns
        -------
        bytes
            The IV followed by the ciphertext.
        """
        if iv is None:
            iv = os.urandom(self.block_size)
        cipher = self.cipher.new(key, self.cipher.MODE_CBC, iv=iv)
        return bytes(iv) + cipher.encrypt(pad(plaintext, self.block_size))

    def decrypt_check(self, key: bytes, data: bytes) -> Tuple[bytes, bool]:
        """
        Decrypt IV || ciphertext and check PKCS#7 padding.

        Returns
        -------
        (plain, valid) : Tuple[bytes, bool]
            plain: the decrypted bytes before unpadding.
            valid: True if unpadding succeeded, False otherwise.

        Raises
        ------
        MalformedInput
            If ``data`` is not at least two whole blocks.
        """
        size = self.block_size
        if len(data) % size != 0 or len(data) < 2 * size:
            raise MalformedInput(f"Invalid data size: {len(data)}")

        cipher = self.cipher.new(key, self.cipher.MODE_CBC, iv=bytes(data[:size]))
        plain = cipher.decrypt(bytes(data[size:]))
        try:
            unpad(plain, size)
            return plain, True
        except InvalidPadding:
            return plain, False

    def __call__(self, key: bytes, data: bytes) -> bool:
        """Return whether ``data`` decrypts to valid padding; malformed data is invalid."""
        with self._lock:
            self.queries += 1
        try:
            _, valid = self.decrypt_check(key, data)
        except MalformedInput:
            return False
        return valid
