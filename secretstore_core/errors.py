"""
Error kinds raised while recovering a key from a V3 keystore.

Every kind subclasses ``KeystoreError`` (itself a ``ValueError``) so
callers can catch the whole family or a single stage:

  - MalformedInput       : not JSON / not a structurally valid document
  - UnsupportedVersion   : ``version`` is not 3
  - UnsupportedKdf       : unknown scheme or invalid scheme parameters
  - UnsupportedPrf       : pbkdf2 with a PRF other than hmac-sha256
  - AuthenticationFailed : MAC mismatch (wrong passphrase or corrupted file)
  - CipherError          : the symmetric decryption step failed
"""

from __future__ import annotations


class KeystoreError(ValueError):
    """Base class for every keystore failure."""


class MalformedInput(KeystoreError):
    pass


class UnsupportedVersion(KeystoreError):
    pass


class UnsupportedKdf(KeystoreError):
    pass


class UnsupportedPrf(KeystoreError):
    pass


class AuthenticationFailed(KeystoreError):
    """The MAC did not match.  Never distinguished any further."""

    def __init__(self, message: str = "wrong passphrase or corrupted file"):
        super().__init__(message)


class CipherError(KeystoreError):
    pass
