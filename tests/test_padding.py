import random
import unittest

from Crypto.Util import Padding

from padding_oracle.errors import InvalidConfiguration, InvalidPadding, MalformedInput
from padding_oracle.padding import pad, unpad


def randbytes(rng, n):
    return bytes(rng.getrandbits(8) for _ in range(n))


class PadTest(unittest.TestCase):

    def setUp(self):
        self.rng = random.Random(0x5EED)

    def test_pad_unpad_roundtrip(self):
        for block_size in range(1, 256):
            data = randbytes(self.rng, self.rng.randrange(0, 600))
            self.assertEqual(unpad(pad(data, block_size), block_size), data)

    def test_pad_shape(self):
        for _ in range(200):
            block_size = self.rng.randint(1, 255)
            data = randbytes(self.rng, self.rng.randrange(0, 1025))
            padded = pad(data, block_size)

            pad_len = len(padded) - len(data)
            self.assertTrue(1 <= pad_len <= block_size)
            self.assertEqual(len(padded) % block_size, 0)
            self.assertEqual(padded[:len(data)], data)
            self.assertEqual(padded[len(data):], bytes([pad_len]) * pad_len)

    def test_aligned_data_gets_full_block(self):
        self.assertEqual(pad(b"YELLOW SUBMARINE", 16), b"YELLOW SUBMARINE" + b"\x10" * 16)
        self.assertEqual(pad(b"", 8), b"\x08" * 8)
        self.assertEqual(pad(b"abc", 1), b"abc\x01")

    def test_known_values(self):
        self.assertEqual(pad(b"YELLOW SUBMARINE", 20), b"YELLOW SUBMARINE\x04\x04\x04\x04")
        self.assertEqual(unpad(b"ICE ICE BABY\x04\x04\x04\x04", 16), b"ICE ICE BABY")
        self.assertEqual(pad(b"\x00" * 10, 255), b"\x00" * 10 + b"\xf5" * 245)

    def test_matches_pycryptodome(self):
        for _ in range(50):
            data = randbytes(self.rng, self.rng.randrange(0, 100))
            self.assertEqual(pad(data, 16), Padding.pad(data, 16))
            self.assertEqual(unpad(pad(data, 16), 16), Padding.unpad(Padding.pad(data, 16), 16))

    def test_accepts_bytearray(self):
        padded = pad(bytearray(b"abc"), 4)
        self.assertIsInstance(padded, bytes)
        self.assertIsInstance(unpad(bytearray(padded), 4), bytes)


class UnpadTest(unittest.TestCase):

    def setUp(self):
        self.rng = random.Random(0xBAD)

    def test_misaligned(self):
        for _ in range(100):
            block_size = self.rng.randint(2, 255)
            padded = pad(randbytes(self.rng, self.rng.randrange(0, 600)), block_size)
            truncated = padded[:len(padded) - self.rng.randint(1, block_size - 1)]
            with self.assertRaises(MalformedInput):
                unpad(truncated, block_size)

    def test_corrupted_pad_bytes(self):
        for _ in range(100):
            block_size = self.rng.randint(2, 255)
            padded = bytearray(pad(randbytes(self.rng, self.rng.randrange(0, 600)), block_size))
            pad_len = padded[-1]
            if pad_len == 1:
                padded[-1] = 0
            else:
                # Any pad byte other than the last one
                i = len(padded) - self.rng.randint(2, pad_len)
                padded[i] = (pad_len + self.rng.randint(1, 255)) % 256
            with self.assertRaises(InvalidPadding):
                unpad(bytes(padded), block_size)

    def test_zero_pad_byte(self):
        with self.assertRaises(InvalidPadding):
            unpad(b"abcdefg\x00", 8)

    def test_pad_byte_larger_than_block(self):
        with self.assertRaises(InvalidPadding):
            unpad(b"\x09" * 16, 8)

    def test_pad_byte_larger_than_data(self):
        with self.assertRaises(InvalidPadding):
            unpad(b"abc\x05", 4)

    def test_empty(self):
        with self.assertRaises(InvalidPadding):
            unpad(b"", 16)

    def test_errors_are_value_errors(self):
        with self.assertRaises(ValueError):
            unpad(b"abc\x02", 4)
        with self.assertRaises(ValueError):
            unpad(b"abc", 4)


class BlockSizeTest(unittest.TestCase):

    def test_invalid_block_sizes(self):
        for block_size in (0, -1, 256, 1000, True, 16.0, "16", None):
            with self.assertRaises(InvalidConfiguration):
                pad(b"data", block_size)
            with self.assertRaises(InvalidConfiguration):
                unpad(b"data", block_size)

    def test_none_data(self):
        with self.assertRaises(InvalidConfiguration):
            pad(None, 16)
        with self.assertRaises(InvalidConfiguration):
            unpad(None, 16)


if __name__ == "__main__":
    unittest.main()
