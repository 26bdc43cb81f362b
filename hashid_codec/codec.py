import dataclasses
import json
import logging
import math
import re
from typing import Iterable, List, Tuple, Union

logger = logging.getLogger(__name__)

DEFAULT_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ1234567890"
DEFAULT_SEPARATORS = "cfhistuCFHISTU"

MIN_ALPHABET_LENGTH = 2
SEP_DIV = 3.5
GUARD_DIV = 12.0

# Largest value a signed 64-bit integer can hold.
MAX_NUMBER = 2**63 - 1

HEX_CHUNK_SIZE = 12
HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")


class HashidsError(ValueError):
    """Base class for every error raised by the codec."""


class ConfigError(HashidsError):
    """The salt / alphabet / separators / min_length combination is unusable."""


class InvalidInputError(HashidsError):
    """Rejected input to encode, decode or the hex adapters."""


class DecodeMismatchError(HashidsError):
    """The hashid was not produced by this codec configuration."""


class ArithmeticOverflowError(HashidsError, OverflowError):
    """A decoded number does not fit in a signed 64-bit integer."""


@dataclasses.dataclass
class CodecConfig:
    salt: str = ""
    min_length: int = 0
    alphabet: str = DEFAULT_ALPHABET
    separators: str = DEFAULT_SEPARATORS
    version: str = "v1"

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "salt": self.salt,
            "min_length": self.min_length,
            "alphabet": self.alphabet,
            "separators": self.separators,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CodecConfig":
        version = data.get("version", "v1")
        if version != "v1":
            raise ConfigError(f"Unsupported codec key version: {version}")
        try:
            min_length = int(data.get("min_length", 0))
        except (TypeError, ValueError):
            raise ConfigError(
                f"min_length must be an integer, got {data.get('min_length')!r}"
            ) from None
        return cls(
            salt=data.get("salt") or "",
            min_length=min_length,
            alphabet=data.get("alphabet", DEFAULT_ALPHABET),
            separators=data.get("separators", DEFAULT_SEPARATORS),
            version=version,
        )


def save_codec_key(cfg: CodecConfig, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cfg.to_dict(), f, indent=2)
        f.write("\n")


def load_codec_key(path: str) -> CodecConfig:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return CodecConfig.from_dict(raw)


def consistent_shuffle(alphabet: str, salt: str) -> str:
    """Permute ``alphabet`` deterministically, driven by the character codes of ``salt``.

    A blank salt leaves the alphabet untouched. Encoding and decoding both
    depend on this producing exactly the same permutation for the same
    inputs, so the read order below must not change.
    """
    if not salt or salt.isspace():
        return alphabet

    letters = list(alphabet)
    v = 0
    p = 0
    for i in range(len(letters) - 1, 0, -1):
        v %= len(salt)
        n = ord(salt[v])
        p += n
        j = (n + v + p) % i
        letters[i], letters[j] = letters[j], letters[i]
        v += 1
    return "".join(letters)


def hash_number(number: int, alphabet: str) -> str:
    radix = len(alphabet)
    chars: List[str] = []
    while True:
        number, rem = divmod(number, radix)
        chars.append(alphabet[rem])
        if number == 0:
            break
    chars.reverse()
    return "".join(chars)


def unhash_number(token: str, alphabet: str) -> int:
    radix = len(alphabet)
    number = 0
    for char in token:
        position = alphabet.find(char)
        if position == -1:
            raise DecodeMismatchError(f"character {char!r} is not part of the alphabet")
        number = number * radix + position
        if number > MAX_NUMBER:
            raise ArithmeticOverflowError(
                f"decoded value of {token!r} exceeds the 64-bit limit {MAX_NUMBER}"
            )
    return number


def _split_on(pattern: "re.Pattern", text: str) -> List[str]:
    return [piece for piece in pattern.split(text) if piece]


def _char_class(chars: str) -> "re.Pattern":
    return re.compile("[" + re.escape(chars) + "]")


def _check_numbers(numbers: Tuple[int, ...]) -> None:
    if not numbers:
        raise InvalidInputError("at least one number is required")
    for number in numbers:
        if isinstance(number, bool) or not isinstance(number, int):
            raise InvalidInputError(f"{number!r} is not an integer")
        if number < 0:
            raise InvalidInputError(f"negative numbers are not allowed: {number}")
        if number > MAX_NUMBER:
            raise InvalidInputError(f"{number} exceeds the 64-bit limit {MAX_NUMBER}")


class Hashids:
    """Encode non-negative integers into short, salted, reversible strings.

    The alphabet, separators and guards are derived once from the
    configuration and never change afterwards, so one instance can be shared
    between threads. Every encode/decode call reshuffles a local copy of the
    alphabet.
    """

    def __init__(
        self,
        salt: str = "",
        min_length: int = 0,
        alphabet: str = DEFAULT_ALPHABET,
        separators: str = DEFAULT_SEPARATORS,
    ):
        if not isinstance(alphabet, str) or not alphabet.strip():
            raise ConfigError("alphabet must be a non-blank string")
        if not isinstance(salt, str):
            raise ConfigError(f"salt must be a string, got {type(salt).__name__}")
        if not isinstance(separators, str):
            raise ConfigError(
                f"separators must be a string, got {type(separators).__name__}"
            )
        if isinstance(min_length, bool) or not isinstance(min_length, int) or min_length < 0:
            raise ConfigError(f"min_length must be a non-negative integer, got {min_length!r}")

        unique = "".join(dict.fromkeys(alphabet))
        if len(unique) < MIN_ALPHABET_LENGTH:
            raise ConfigError(
                f"alphabet must contain at least {MIN_ALPHABET_LENGTH} unique characters"
            )
        if any(char.isspace() for char in unique):
            raise ConfigError("alphabet cannot contain whitespace")

        self._salt = salt
        self._min_length = min_length
        self._raw_alphabet = alphabet
        self._raw_separators = separators

        self._alphabet, self._separators, self._guards = self._derive_charsets(
            unique, separators, salt
        )
        if (
            len(self._alphabet) < MIN_ALPHABET_LENGTH
            or not self._separators
            or not self._guards
        ):
            raise ConfigError(
                f"alphabet {alphabet!r} is too short once separators and guards are taken out"
            )

        self._separators_regex = _char_class(self._separators)
        self._guards_regex = _char_class(self._guards)
        logger.debug(
            "Derived charsets: alphabet=%d separators=%d guards=%d",
            len(self._alphabet),
            len(self._separators),
            len(self._guards),
        )

    @staticmethod
    def _derive_charsets(alphabet: str, separators: str, salt: str) -> Tuple[str, str, str]:
        # Separators may only use alphabet characters, and the alphabet loses them.
        separators = "".join(dict.fromkeys(c for c in separators if c in alphabet))
        alphabet = "".join(c for c in alphabet if c not in separators)
        separators = consistent_shuffle(separators, salt)

        # The ratio uses integer division; existing hashids depend on it.
        if not separators or len(alphabet) // len(separators) > SEP_DIV:
            separators_length = math.ceil(len(alphabet) / SEP_DIV)
            if separators_length == 1:
                separators_length = 2
            if separators_length > len(separators):
                diff = separators_length - len(separators)
                separators += alphabet[:diff]
                alphabet = alphabet[diff:]
            else:
                separators = separators[:separators_length]

        alphabet = consistent_shuffle(alphabet, salt)

        guard_count = math.ceil(len(alphabet) / GUARD_DIV)
        if len(alphabet) < 3:
            guards = separators[:guard_count]
            separators = separators[guard_count:]
        else:
            guards = alphabet[:guard_count]
            alphabet = alphabet[guard_count:]
        return alphabet, separators, guards

    @classmethod
    def from_config(cls, cfg: CodecConfig) -> "Hashids":
        return cls(
            salt=cfg.salt,
            min_length=cfg.min_length,
            alphabet=cfg.alphabet,
            separators=cfg.separators,
        )

    @property
    def config(self) -> CodecConfig:
        return CodecConfig(
            salt=self._salt,
            min_length=self._min_length,
            alphabet=self._raw_alphabet,
            separators=self._raw_separators,
        )

    @property
    def salt(self) -> str:
        return self._salt

    @property
    def min_length(self) -> int:
        return self._min_length

    @property
    def alphabet(self) -> str:
        return self._alphabet

    @property
    def separators(self) -> str:
        return self._separators

    @property
    def guards(self) -> str:
        return self._guards

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(salt={self._salt!r}, min_length={self._min_length}, "
            f"alphabet={self._raw_alphabet!r}, separators={self._raw_separators!r})"
        )

    def encode(self, *numbers: Union[int, Iterable[int]]) -> str:
        """Encode one or more numbers, given as arguments or as a single iterable."""
        if len(numbers) == 1 and not isinstance(numbers[0], int):
            try:
                numbers = tuple(numbers[0])
            except TypeError:
                raise InvalidInputError(f"{numbers[0]!r} is not an integer") from None
        _check_numbers(numbers)
        return self._encode(numbers)

    def _encode(self, numbers: Tuple[int, ...]) -> str:
        alphabet = self._alphabet
        separators = self._separators
        guards = self._guards
        min_length = self._min_length

        numbers_hash = sum(number % (i + 100) for i, number in enumerate(numbers))
        lottery = alphabet[numbers_hash % len(alphabet)]
        parts = [lottery]

        for i, number in enumerate(numbers):
            buffer = lottery + self._salt + alphabet
            alphabet = consistent_shuffle(alphabet, buffer[: len(alphabet)])
            last = hash_number(number, alphabet)
            parts.append(last)

            if i + 1 < len(numbers):
                number %= ord(last[0]) + i
                parts.append(separators[number % len(separators)])

        hashid = "".join(parts)

        if len(hashid) < min_length:
            guard_index = (numbers_hash + ord(hashid[0])) % len(guards)
            hashid = guards[guard_index] + hashid

            if len(hashid) < min_length:
                guard_index = (numbers_hash + ord(hashid[2])) % len(guards)
                hashid += guards[guard_index]

        half_length = len(alphabet) // 2
        while len(hashid) < min_length:
            alphabet = consistent_shuffle(alphabet, alphabet)
            hashid = alphabet[half_length:] + hashid + alphabet[:half_length]

            excess = len(hashid) - min_length
            if excess > 0:
                start = excess // 2
                hashid = hashid[start : start + min_length]

        return hashid

    def decode(self, hashid: str) -> Tuple[int, ...]:
        """Recover the numbers behind ``hashid``.

        Raises DecodeMismatchError unless re-encoding the result reproduces
        ``hashid`` exactly. A hashid consisting only of guard characters
        decodes to an empty tuple.
        """
        if not isinstance(hashid, str) or not hashid.strip():
            raise InvalidInputError("hashid must be a non-blank string")

        pieces = _split_on(self._guards_regex, hashid)
        index = 1 if len(pieces) in (2, 3) else 0
        payload = pieces[index] if pieces else ""
        if not payload:
            return ()

        lottery = payload[0]
        tokens = _split_on(self._separators_regex, payload[1:])
        if not tokens:
            logger.debug("Rejected hashid %r: no encoded numbers after the lottery", hashid)
            raise DecodeMismatchError(f"hashid {hashid!r} is incorrect")

        alphabet = self._alphabet
        numbers: List[int] = []
        for token in tokens:
            buffer = lottery + self._salt + alphabet
            alphabet = consistent_shuffle(alphabet, buffer[: len(alphabet)])
            numbers.append(unhash_number(token, alphabet))

        result = tuple(numbers)
        if self._encode(result) != hashid:
            logger.debug("Rejected hashid %r: re-encoding does not match", hashid)
            raise DecodeMismatchError(f"hashid {hashid!r} is incorrect")
        return result

    def encode_hex(self, hex_str: str) -> str:
        """Encode a hex string, read in chunks of up to 12 digits."""
        if not isinstance(hex_str, str) or not HEX_PATTERN.fullmatch(hex_str):
            raise InvalidInputError(f"{hex_str!r} is not a hex string")
        numbers = [
            int(hex_str[i : i + HEX_CHUNK_SIZE], 16)
            for i in range(0, len(hex_str), HEX_CHUNK_SIZE)
        ]
        return self.encode(numbers)

    def decode_hex(self, hashid: str) -> str:
        return "".join(f"{number:X}" for number in self.decode(hashid))


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
