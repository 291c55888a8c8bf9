"""
Hashing and encoding helpers shared by the decoder, encoder and wallet.
"""

from __future__ import annotations

import hmac

from Crypto.Hash import keccak


def keccak256(data: bytes) -> bytes:
    """Keccak-256 as used by Ethereum (pre-NIST padding, not SHA3-256)."""
    return keccak.new(digest_bits=256, data=data).digest()


def keystore_mac(derived_key: bytes | bytearray, ciphertext: bytes) -> str:
    """Hex MAC over the second 16 bytes of the derived key and the ciphertext."""
    return keccak256(bytes(derived_key[16:32]) + ciphertext).hex()


def macs_equal(computed: str, expected: str) -> bool:
    """Full-length comparison of two hex MAC strings."""
    try:
        return hmac.compare_digest(computed, expected)
    except TypeError:
        # non-ASCII expected value
        return False


def decode_hex(value: object) -> bytes:
    """
    Decode a hex string (mixed case allowed, optional ``0x`` prefix).

    Raises ValueError for anything that is not an even-length hex string.
    """
    if not isinstance(value, str):
        raise ValueError(f"expected hex string, got {type(value).__name__}")
    if value[:2] in ("0x", "0X"):
        value = value[2:]
    return bytes.fromhex(value)


def zeroize(buf: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    for i in range(len(buf)):
        buf[i] = 0
