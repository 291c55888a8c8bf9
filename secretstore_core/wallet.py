"""
Wallet wrapper around a recovered secp256k1 private key.

A wallet provides:
  - Public key and address derivation (keccak256 of the public key)
  - EIP-55 checksummed address
  - V3 keystore import / export and the conventional keystore filename
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ecdsa import SECP256k1, SigningKey

from secretstore_core.crypto_utils import keccak256
from secretstore_core.encoder import EncoderOptions, encode, v3_filename
from secretstore_core.keystore import PRIVATE_KEY_LENGTH, decipher


def checksum_address(address_hex: str) -> str:
    """EIP-55 mixed-case encoding of a 20-byte hex address."""
    addr = address_hex.lower()
    if addr.startswith("0x"):
        addr = addr[2:]
    digest = keccak256(addr.encode("ascii")).hex()
    return "0x" + "".join(
        ch.upper() if int(digest[i], 16) >= 8 else ch
        for i, ch in enumerate(addr)
    )


class Wallet:
    """Holds one private key and the identifiers derived from it."""

    def __init__(self, private_key: bytes):
        if len(private_key) != PRIVATE_KEY_LENGTH:
            raise ValueError(f"Private key must be {PRIVATE_KEY_LENGTH} bytes")
        secexp = int.from_bytes(private_key, "big")
        if not 1 <= secexp < SECP256k1.order:
            raise ValueError("Private key does not satisfy the curve requirements")

        self.private_key = bytes(private_key)
        sk = SigningKey.from_string(self.private_key, curve=SECP256k1)
        # 64 bytes: x || y, no 0x04 prefix
        self.public_key: bytes = sk.get_verifying_key().to_string()
        self.address_bytes: bytes = keccak256(self.public_key)[-20:]

    # ---- factory methods ----

    @classmethod
    def from_v3(cls, source: Any, passphrase: bytes | str, lenient: bool = False) -> Wallet:
        """Decrypt a V3 keystore (mapping or JSON text) into a wallet."""
        return cls(decipher(source, passphrase, lenient=lenient))

    # ---- identifiers ----

    @property
    def address(self) -> str:
        """``0x``-prefixed lowercase hex address."""
        return "0x" + self.address_bytes.hex()

    @property
    def checksum_address(self) -> str:
        return checksum_address(self.address_bytes.hex())

    # ---- serialisation ----

    def to_v3(self, passphrase: bytes | str, options: EncoderOptions | None = None) -> dict:
        """Encrypt this wallet's private key into a V3 keystore dict."""
        return encode(self.private_key, passphrase, options, address=self.address_bytes.hex())

    def v3_filename(self, timestamp: datetime | float | None = None) -> str:
        return v3_filename(self.address_bytes.hex(), timestamp)

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "public_key": self.public_key.hex(),
        }

    def __repr__(self) -> str:
        return f"Wallet({self.checksum_address})"
