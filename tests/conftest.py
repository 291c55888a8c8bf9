"""
Shared pytest fixtures for the secretstore test suite.
"""

import copy

import pytest

from keystore_vectors import (
    FAST_PBKDF2,
    FAST_SCRYPT,
    PASSPHRASE,
    PBKDF2_VECTOR,
    PRIVATE_KEY,
    SCRYPT_VECTOR,
)
from secretstore_core.encoder import EncoderOptions, encode


@pytest.fixture
def pbkdf2_vector():
    return copy.deepcopy(PBKDF2_VECTOR)


@pytest.fixture
def scrypt_vector():
    return copy.deepcopy(SCRYPT_VECTOR)


@pytest.fixture
def fast_scrypt_options():
    return EncoderOptions(**FAST_SCRYPT)


@pytest.fixture
def fast_pbkdf2_options():
    return EncoderOptions(**FAST_PBKDF2)


@pytest.fixture
def scrypt_keystore(fast_scrypt_options):
    """Freshly encoded scrypt keystore for PRIVATE_KEY / PASSPHRASE."""
    return encode(PRIVATE_KEY, PASSPHRASE, fast_scrypt_options)


@pytest.fixture
def pbkdf2_keystore(fast_pbkdf2_options):
    """Freshly encoded pbkdf2 keystore for PRIVATE_KEY / PASSPHRASE."""
    return encode(PRIVATE_KEY, PASSPHRASE, fast_pbkdf2_options)
