"""
TOML-based configuration for secretstore.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from secretstore_core.config import load_config
    cfg = load_config("secretstore.toml")
    doc = encode(key, passphrase, cfg.encoder)
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from secretstore_core.encoder import EncoderOptions


@dataclass
class DecoderConfig:
    """Decoder settings.

    ``lenient`` lower-cases keystore text before parsing, for legacy files
    with upper-case hex.  Leave it off unless such files must be read.
    """
    lenient: bool = False


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class SecretStoreConfig:
    """Top-level configuration container."""
    encoder: EncoderOptions = field(default_factory=EncoderOptions)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# only these encoder keys are settable from config; salt/iv/uuid stay random
_ENCODER_KEYS = {"kdf", "n", "r", "p", "c", "prf", "dklen", "cipher"}


def _merge(dc: Any, raw: dict[str, Any], allowed: set[str] | None = None) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if allowed is not None and key_under not in allowed:
            continue
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(path: str | None = None) -> SecretStoreConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        SECRETSTORE_KDF        -> encoder.kdf
        SECRETSTORE_SCRYPT_N   -> encoder.n
        SECRETSTORE_PBKDF2_C   -> encoder.c
        SECRETSTORE_CIPHER     -> encoder.cipher
        SECRETSTORE_LENIENT    -> decoder.lenient  (1/true/yes/on)
        SECRETSTORE_LOG_LEVEL  -> logging.level
        SECRETSTORE_LOG_FMT    -> logging.format
    """
    cfg = SecretStoreConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            if "encoder" in data:
                _merge(cfg.encoder, data["encoder"], _ENCODER_KEYS)
            if "decoder" in data:
                _merge(cfg.decoder, data["decoder"])
            if "logging" in data:
                _merge(cfg.logging, data["logging"])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("SECRETSTORE_KDF"):
        cfg.encoder.kdf = v
    if v := os.environ.get("SECRETSTORE_SCRYPT_N"):
        cfg.encoder.n = int(v)
    if v := os.environ.get("SECRETSTORE_PBKDF2_C"):
        cfg.encoder.c = int(v)
    if v := os.environ.get("SECRETSTORE_CIPHER"):
        cfg.encoder.cipher = v
    if v := os.environ.get("SECRETSTORE_LENIENT"):
        cfg.decoder.lenient = _env_bool(v)
    if v := os.environ.get("SECRETSTORE_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("SECRETSTORE_LOG_FMT"):
        cfg.logging.format = v

    return cfg
