"""Declarative chain steps wrapping the primitives.

Each step is a frozen dataclass with ``apply(data, key) -> bytes``. Keyed
steps read the key derived once per decode; the rest ignore it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from . import primitives


@dataclass(frozen=True)
class Reverse:
    name: ClassVar[str] = "reverse"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return primitives.reverse(data)


@dataclass(frozen=True)
class StripPrefix:
    """Remove a leading marker; with ``required`` its absence is an error."""

    prefix: bytes
    required: bool = False
    name: ClassVar[str] = "strip_prefix"

    def apply(self, data: bytes, key: bytes) -> bytes:
        if data.startswith(self.prefix):
            return data[len(self.prefix) :]
        if self.required:
            raise ValueError(f"missing prefix {self.prefix!r}")
        return data


@dataclass(frozen=True)
class UrlSafeB64Decode:
    name: ClassVar[str] = "url_safe_b64_decode"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return primitives.url_safe_b64_decode(data)


@dataclass(frozen=True)
class HexPairDecode:
    name: ClassVar[str] = "hex_pair_decode"

    def apply(self, data: bytes, key: bytes) -> bytes:
        decoded = primitives.hex_pair_decode(data)
        if not decoded:
            raise ValueError("no hex pairs in input")
        return decoded


@dataclass(frozen=True)
class ModShift:
    delta: int
    name: ClassVar[str] = "mod_shift"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return primitives.mod_shift(data, self.delta)


@dataclass(frozen=True)
class XorRepeat:
    name: ClassVar[str] = "xor_repeat"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return primitives.xor_repeat(data, key)


@dataclass(frozen=True)
class XorFeedback:
    name: ClassVar[str] = "xor_feedback"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return primitives.xor_feedback_decode(data, key)


@dataclass(frozen=True)
class Replace:
    """Replace every occurrence of *old* with *new*."""

    old: bytes
    new: bytes
    name: ClassVar[str] = "replace"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return data.replace(self.old, self.new)


@dataclass(frozen=True)
class RotateLetters:
    shift: int
    name: ClassVar[str] = "rotate_letters"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return primitives.rotate_letters(data, self.shift)


@dataclass(frozen=True)
class CustomAlphabetB64Decode:
    alphabet: str = primitives.PLAYERJS_ALPHABET
    name: ClassVar[str] = "custom_alphabet_b64_decode"

    def apply(self, data: bytes, key: bytes) -> bytes:
        return primitives.custom_alphabet_b64_decode(data, self.alphabet)


Transform = Union[
    Reverse,
    StripPrefix,
    Replace,
    UrlSafeB64Decode,
    HexPairDecode,
    ModShift,
    XorRepeat,
    XorFeedback,
    RotateLetters,
    CustomAlphabetB64Decode,
]
