"""
secretstore - recover private keys from Web3 Secret Storage (V3) keystores.

Key features:
- scrypt and PBKDF2-HMAC-SHA256 key derivation
- Keccak-256 MAC verification before any decryption
- AES-128-CTR / CBC / CFB / OFB decryption of the stored key
- V3 keystore encoding and the UTC--<timestamp>--<address> filename
- secp256k1 wallet wrapper with EIP-55 addresses
"""

__version__ = "1.0.0"
__all__ = [
    "errors",
    "crypto_utils",
    "kdf",
    "keystore",
    "encoder",
    "wallet",
    "config",
    "logging_config",
]
