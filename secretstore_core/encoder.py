"""
V3 keystore encoder.

Encrypts a raw 32-byte private key under a passphrase and produces a
document the decoder in ``secretstore_core.keystore`` can read back:

  - fresh 32-byte salt and 16-byte IV per document (unless fixed in the
    options, for reproducible test vectors)
  - scrypt (default) or pbkdf2-hmac-sha256 key derivation
  - aes-128-ctr (default) or aes-128-cbc encryption
  - keccak256 MAC over dk[16:32] || ciphertext

Also provides the conventional keystore filename
``UTC--<timestamp>--<address>``.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad

from secretstore_core.crypto_utils import decode_hex, keystore_mac, zeroize
from secretstore_core.errors import CipherError, UnsupportedKdf
from secretstore_core.kdf import (
    PBKDF2_KDF,
    SCRYPT,
    SUPPORTED_PRF,
    KdfParams,
    derive,
    parse_kdf_params,
)
from secretstore_core.keystore import CIPHER_KEY_LENGTH, KEYSTORE_VERSION, PRIVATE_KEY_LENGTH

logger = logging.getLogger("secretstore.encoder")

SALT_LENGTH = 32
IV_LENGTH = 16

ENCODABLE_CIPHERS = ("aes-128-ctr", "aes-128-cbc")


@dataclass
class EncoderOptions:
    """KDF and cipher choices for new keystores."""
    kdf: str = SCRYPT
    n: int = 262_144
    r: int = 8
    p: int = 1
    c: int = 262_144
    prf: str = SUPPORTED_PRF
    dklen: int = 32
    cipher: str = "aes-128-ctr"
    salt: Optional[bytes] = None
    iv: Optional[bytes] = None
    uuid: Optional[bytes] = None

    def kdf_params(self, salt: bytes) -> KdfParams:
        """Validated parameter variant for the configured scheme."""
        if self.kdf == SCRYPT:
            raw = {"n": self.n, "r": self.r, "p": self.p, "dklen": self.dklen}
        elif self.kdf == PBKDF2_KDF:
            raw = {"c": self.c, "prf": self.prf, "dklen": self.dklen}
        else:
            raise UnsupportedKdf(f"Unsupported key derivation scheme: {self.kdf!r}")
        raw["salt"] = salt.hex()
        return parse_kdf_params(self.kdf, raw)


def _encrypt(cipher: str, key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    try:
        if cipher == "aes-128-ctr":
            return AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=iv).encrypt(plaintext)
        if cipher == "aes-128-cbc":
            return AES.new(key, AES.MODE_CBC, iv=iv).encrypt(pad(plaintext, AES.block_size))
    except ValueError as exc:
        raise CipherError(f"{cipher}: {exc}") from exc
    raise CipherError(f"Unsupported cipher: {cipher!r}")


def encode(private_key: bytes,
           passphrase: bytes | str,
           options: EncoderOptions | None = None,
           address: str | None = None) -> dict:
    """
    Encrypt *private_key* into a V3 keystore dict.

    *address* is copied into the document as-is (conventionally lowercase
    hex without ``0x``); it is informational and never checked on decode.
    """
    opts = options or EncoderOptions()
    if len(private_key) != PRIVATE_KEY_LENGTH:
        raise ValueError(f"private key must be {PRIVATE_KEY_LENGTH} bytes")
    if opts.cipher not in ENCODABLE_CIPHERS:
        raise CipherError(f"Unsupported cipher: {opts.cipher!r}")

    salt = opts.salt if opts.salt is not None else os.urandom(SALT_LENGTH)
    iv = opts.iv if opts.iv is not None else os.urandom(IV_LENGTH)
    params = opts.kdf_params(salt)

    derived = bytearray(derive(passphrase, params))
    try:
        ciphertext = _encrypt(opts.cipher, bytes(derived[:CIPHER_KEY_LENGTH]), iv, private_key)
        mac = keystore_mac(derived, ciphertext)
    finally:
        zeroize(derived)

    key_id = uuid.UUID(bytes=opts.uuid, version=4) if opts.uuid is not None else uuid.uuid4()
    logger.debug("encoded keystore %s (kdf=%s cipher=%s)", key_id, params.kdf, opts.cipher)

    doc: dict = {
        "version": KEYSTORE_VERSION,
        "id": str(key_id),
        "crypto": {
            "ciphertext": ciphertext.hex(),
            "cipherparams": {"iv": iv.hex()},
            "cipher": opts.cipher,
            "kdf": params.kdf,
            "kdfparams": params.to_dict(),
            "mac": mac,
        },
    }
    if address is not None:
        doc["address"] = address
    return doc


def v3_filename(address: str, timestamp: datetime | float | None = None) -> str:
    """
    Conventional keystore file name, e.g.
    ``UTC--2016-03-18T13-35-12.123Z--<address>``.
    """
    if timestamp is None:
        ts = datetime.now(timezone.utc)
    elif isinstance(timestamp, datetime):
        ts = timestamp.astimezone(timezone.utc)
    else:
        ts = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    iso = ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"
    if address[:2] in ("0x", "0X"):
        address = address[2:]
    return "UTC--" + iso.replace(":", "-") + "--" + address.lower()


def raw_private_key_to_v3(private_key_hex: str,
                          passphrase: bytes | str,
                          options: EncoderOptions | None = None) -> dict:
    """
    Encrypt a hex private key and return ``{"filename", "data"}`` where
    *data* is the keystore serialised as JSON text.
    """
    from secretstore_core.wallet import Wallet

    wallet = Wallet(decode_hex(private_key_hex))
    doc = wallet.to_v3(passphrase, options)
    return {
        "filename": wallet.v3_filename(),
        "data": json.dumps(doc),
    }
