"""
Key-derivation schemes for V3 keystores.

Two schemes are recognised, selected by the document's ``crypto.kdf`` tag:

  - **scrypt** : ``{n, r, p, dklen, salt}``
  - **pbkdf2** : ``{c, prf, dklen, salt}`` with ``prf == "hmac-sha256"``

Parameters are parsed into one dataclass per scheme; each validates only
its own fields.  ``derive`` is pure and deterministic and blocks for as
long as the cost parameters demand.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from Crypto.Hash import SHA256
from Crypto.Protocol.KDF import PBKDF2, scrypt

from secretstore_core.crypto_utils import decode_hex
from secretstore_core.errors import UnsupportedKdf, UnsupportedPrf

logger = logging.getLogger("secretstore.kdf")

SCRYPT = "scrypt"
PBKDF2_KDF = "pbkdf2"
SUPPORTED_PRF = "hmac-sha256"

# [0,16) is the cipher key, [16,32) the MAC key
MIN_DKLEN = 32


@dataclass(frozen=True)
class ScryptParams:
    n: int
    r: int
    p: int
    dklen: int
    salt: bytes

    kdf = SCRYPT

    def to_dict(self) -> dict:
        return {
            "dklen": self.dklen,
            "n": self.n,
            "p": self.p,
            "r": self.r,
            "salt": self.salt.hex(),
        }


@dataclass(frozen=True)
class Pbkdf2Params:
    c: int
    dklen: int
    salt: bytes
    prf: str = SUPPORTED_PRF

    kdf = PBKDF2_KDF

    def to_dict(self) -> dict:
        return {
            "c": self.c,
            "dklen": self.dklen,
            "prf": self.prf,
            "salt": self.salt.hex(),
        }


KdfParams = Union[ScryptParams, Pbkdf2Params]


def _positive_int(raw: Mapping[str, Any], name: str, kdf: str) -> int:
    if name not in raw:
        raise UnsupportedKdf(f"{kdf}: missing parameter '{name}'")
    value = raw[name]
    # bool is an int subclass but never a valid cost
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnsupportedKdf(f"{kdf}: parameter '{name}' must be an integer")
    if value < 1:
        raise UnsupportedKdf(f"{kdf}: parameter '{name}' must be positive")
    return value


def _dklen(raw: Mapping[str, Any], kdf: str) -> int:
    dklen = _positive_int(raw, "dklen", kdf)
    if dklen < MIN_DKLEN:
        raise UnsupportedKdf(f"{kdf}: dklen must be at least {MIN_DKLEN}, got {dklen}")
    return dklen


def _salt(raw: Mapping[str, Any], kdf: str) -> bytes:
    if "salt" not in raw:
        raise UnsupportedKdf(f"{kdf}: missing parameter 'salt'")
    try:
        return decode_hex(raw["salt"])
    except ValueError as exc:
        raise UnsupportedKdf(f"{kdf}: salt is not valid hex") from exc


def parse_kdf_params(kdf: Any, raw: Any) -> KdfParams:
    """
    Build the parameter variant for *kdf* from the raw ``kdfparams`` object.

    Raises UnsupportedKdf for an unknown scheme or invalid fields and
    UnsupportedPrf for a pbkdf2 PRF other than hmac-sha256.
    """
    if kdf == SCRYPT:
        if not isinstance(raw, Mapping):
            raise UnsupportedKdf("scrypt: kdfparams must be an object")
        return ScryptParams(
            n=_positive_int(raw, "n", kdf),
            r=_positive_int(raw, "r", kdf),
            p=_positive_int(raw, "p", kdf),
            dklen=_dklen(raw, kdf),
            salt=_salt(raw, kdf),
        )

    if kdf == PBKDF2_KDF:
        if not isinstance(raw, Mapping):
            raise UnsupportedKdf("pbkdf2: kdfparams must be an object")
        prf = raw.get("prf")
        if prf != SUPPORTED_PRF:
            raise UnsupportedPrf(f"Unsupported parameters to PBKDF2: prf={prf!r}")
        return Pbkdf2Params(
            c=_positive_int(raw, "c", kdf),
            dklen=_dklen(raw, kdf),
            salt=_salt(raw, kdf),
            prf=prf,
        )

    raise UnsupportedKdf(f"Unsupported key derivation scheme: {kdf!r}")


def derive(passphrase: bytes | str, params: KdfParams) -> bytes:
    """Stretch *passphrase* into ``params.dklen`` bytes."""
    if isinstance(passphrase, str):
        passphrase = passphrase.encode("utf-8")

    if isinstance(params, ScryptParams):
        logger.debug("scrypt n=%d r=%d p=%d dklen=%d", params.n, params.r, params.p, params.dklen)
        try:
            return scrypt(passphrase, params.salt, params.dklen, params.n, params.r, params.p)
        except ValueError as exc:
            # non power-of-two n, n too large for r, ...
            raise UnsupportedKdf(f"scrypt: {exc}") from exc

    if isinstance(params, Pbkdf2Params):
        if params.prf != SUPPORTED_PRF:
            raise UnsupportedPrf(f"Unsupported parameters to PBKDF2: prf={params.prf!r}")
        logger.debug("pbkdf2 c=%d dklen=%d", params.c, params.dklen)
        return PBKDF2(passphrase, params.salt, params.dklen, params.c, hmac_hash_module=SHA256)

    raise UnsupportedKdf(f"Unsupported key derivation parameters: {type(params).__name__}")
