"""Reversible, salted short ids ("hashids") for non-negative integers."""

from .codec import (
    DEFAULT_ALPHABET,
    DEFAULT_SEPARATORS,
    MAX_NUMBER,
    ArithmeticOverflowError,
    CodecConfig,
    ConfigError,
    DecodeMismatchError,
    Hashids,
    HashidsError,
    InvalidInputError,
    consistent_shuffle,
    hash_number,
    load_codec_key,
    save_codec_key,
    unhash_number,
)

__all__ = [
    "DEFAULT_ALPHABET",
    "DEFAULT_SEPARATORS",
    "MAX_NUMBER",
    "ArithmeticOverflowError",
    "CodecConfig",
    "ConfigError",
    "DecodeMismatchError",
    "Hashids",
    "HashidsError",
    "InvalidInputError",
    "consistent_shuffle",
    "hash_number",
    "load_codec_key",
    "save_codec_key",
    "unhash_number",
]

__version__ = "0.1.0"
