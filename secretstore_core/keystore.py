"""
V3 keystore decoder.

Recovers a raw 32-byte private key from a Web3 Secret Storage (version 3)
document and a passphrase.  The pipeline is linear and every step is
terminal on failure:

  1. parse    : JSON text → object (optionally lower-cased first)
  2. version  : must be 3
  3. derive   : scrypt / pbkdf2 via ``secretstore_core.kdf``
  4. MAC      : keccak256(dk[16:32] || ciphertext) against ``crypto.mac``
  5. decrypt  : AES-128 with dk[0:16] and ``cipherparams.iv``

Fields are read in that order, so a document rejected at one step never
has its later fields inspected.  The derived key lives in a bytearray
owned by the call and is zeroed on every exit path.

Usage:
    from secretstore_core.keystore import decipher
    private_key = decipher(json_text, "passphrase")
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from secretstore_core.crypto_utils import decode_hex, keystore_mac, macs_equal, zeroize
from secretstore_core.errors import (
    AuthenticationFailed,
    CipherError,
    KeystoreError,
    MalformedInput,
    UnsupportedVersion,
)
from secretstore_core.kdf import derive, parse_kdf_params

logger = logging.getLogger("secretstore.keystore")

KEYSTORE_VERSION = 3
PRIVATE_KEY_LENGTH = 32
CIPHER_KEY_LENGTH = 16

# cipher name -> (pycryptodome mode, extra kwargs for AES.new, iv kwarg name)
_CIPHERS: dict[str, tuple[int, dict[str, Any], str]] = {
    "aes-128-ctr": (AES.MODE_CTR, {"nonce": b""}, "initial_value"),
    "aes-128-cbc": (AES.MODE_CBC, {}, "iv"),
    "aes-128-cfb": (AES.MODE_CFB, {"segment_size": 128}, "iv"),
    "aes-128-ofb": (AES.MODE_OFB, {}, "iv"),
}

SUPPORTED_CIPHERS = tuple(_CIPHERS)


def load_document(source: Any, lenient: bool = False) -> Mapping[str, Any]:
    """
    Return the keystore object for *source*.

    Text (``str`` or UTF-8 ``bytes``) is parsed as JSON.  With *lenient*
    the whole text is lower-cased before parsing, a blunt fix for legacy
    files with upper-case hex.  It also lower-cases every other string in
    the text, so it stays opt-in.  Pre-parsed mappings are returned
    untouched and *lenient* does not apply to them.
    """
    if isinstance(source, Mapping):
        return source

    if isinstance(source, (bytes, bytearray)):
        try:
            source = bytes(source).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedInput("keystore text is not valid UTF-8") from exc

    if not isinstance(source, str):
        raise MalformedInput(f"unsupported keystore input type: {type(source).__name__}")

    text = source.lower() if lenient else source
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"keystore is not valid JSON: {exc.msg}") from exc

    if not isinstance(doc, dict):
        raise MalformedInput("keystore must be a JSON object")
    return doc


def _check_version(doc: Mapping[str, Any]) -> None:
    version = doc.get("version")
    if isinstance(version, bool) or version != KEYSTORE_VERSION:
        raise UnsupportedVersion(f"Not a V3 wallet (version={version!r})")


def _crypto_section(doc: Mapping[str, Any]) -> Mapping[str, Any]:
    section = doc.get("crypto")
    if not isinstance(section, Mapping):
        raise MalformedInput("keystore has no 'crypto' object")
    return section


def _ciphertext(section: Mapping[str, Any]) -> bytes:
    if "ciphertext" not in section:
        raise MalformedInput("keystore has no ciphertext")
    try:
        return decode_hex(section["ciphertext"])
    except ValueError as exc:
        raise MalformedInput("ciphertext is not valid hex") from exc


def _expected_mac(section: Mapping[str, Any]) -> str:
    mac = section.get("mac")
    if not isinstance(mac, str):
        raise MalformedInput("keystore has no mac")
    return mac


def _decrypt(section: Mapping[str, Any], key: bytes, ciphertext: bytes) -> bytes:
    name = section.get("cipher")
    # OpenSSL cipher names are case-insensitive
    if isinstance(name, str):
        name = name.lower()
    if name not in _CIPHERS:
        raise CipherError(f"Unsupported cipher: {name!r}")
    mode, extra, iv_arg = _CIPHERS[name]

    params = section.get("cipherparams")
    if not isinstance(params, Mapping) or "iv" not in params:
        raise CipherError("keystore has no cipherparams.iv")
    try:
        iv = decode_hex(params["iv"])
    except ValueError as exc:
        raise CipherError("cipherparams.iv is not valid hex") from exc

    try:
        cipher = AES.new(key, mode, **{iv_arg: iv}, **extra)
        plaintext = cipher.decrypt(ciphertext)
        if mode == AES.MODE_CBC:
            plaintext = unpad(plaintext, AES.block_size)
    except (ValueError, TypeError) as exc:
        # wrong IV length, ciphertext not block aligned, bad padding
        raise CipherError(f"{name}: {exc}") from exc

    if len(plaintext) != PRIVATE_KEY_LENGTH:
        raise CipherError(
            f"decrypted key is {len(plaintext)} bytes, expected {PRIVATE_KEY_LENGTH}"
        )
    return plaintext


def decipher(document: Any, passphrase: bytes | str, lenient: bool = False) -> bytes:
    """
    Recover the private key stored in *document*.

    *document* is a parsed keystore mapping or its JSON text.  Raises a
    ``KeystoreError`` subclass on failure and never returns partial
    results.
    """
    try:
        doc = load_document(document, lenient=lenient)
        _check_version(doc)
        section = _crypto_section(doc)
        params = parse_kdf_params(section.get("kdf"), section.get("kdfparams"))
        derived = bytearray(derive(passphrase, params))
        try:
            ciphertext = _ciphertext(section)
            if not macs_equal(keystore_mac(derived, ciphertext), _expected_mac(section)):
                raise AuthenticationFailed()
            return _decrypt(section, bytes(derived[:CIPHER_KEY_LENGTH]), ciphertext)
        finally:
            zeroize(derived)
    except KeystoreError as exc:
        logger.warning("keystore decode failed: %s", type(exc).__name__)
        raise


def decipher_file(path: str | Path, passphrase: bytes | str, lenient: bool = False) -> bytes:
    """Read a keystore file (UTF-8 JSON) and recover its private key."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedInput(f"cannot read keystore file {path}: {exc}") from exc
    return decipher(text, passphrase, lenient=lenient)
