"""Reversible byte/string operations used by the codec chains.

Every function is pure. Decoders raise ``ValueError`` (``binascii.Error``
is a subclass) on malformed input; callers turn that into ``DecodeError``.
"""

from __future__ import annotations

import base64
import re
from typing import TypeVar

_S = TypeVar("_S", str, bytes)

_NON_HEX_RE = re.compile(rb"[^0-9a-fA-F]")


def reverse(data: _S) -> _S:
    """Reverse a string or byte string."""
    return data[::-1]


def _as_text(data: str | bytes) -> str:
    if isinstance(data, bytes):
        return data.decode("ascii")
    return data


def url_safe_b64_decode(data: str | bytes) -> bytes:
    """Decode URL-safe base64, tolerating missing or stray trailing padding.

    ``-``/``_`` are translated to ``+``/``/`` first, so standard base64
    input decodes as well.
    """
    text = _as_text(data).strip().replace("-", "+").replace("_", "/")
    text = text.rstrip("=")
    if len(text) % 4 == 1:
        raise ValueError(f"invalid base64 length: {len(text)}")
    text += "=" * (-len(text) % 4)
    return base64.b64decode(text, validate=True)


def url_safe_b64_encode(data: bytes, *, pad: bool = True) -> str:
    """Encode bytes as URL-safe base64."""
    encoded = base64.urlsafe_b64encode(data).decode("ascii")
    return encoded if pad else encoded.rstrip("=")


def hex_pair_decode(data: str | bytes) -> bytes:
    """Drop non-hex characters, then decode the remaining byte pairs.

    A trailing unpaired nibble is ignored.
    """
    raw = data.encode("latin-1") if isinstance(data, str) else data
    cleaned = _NON_HEX_RE.sub(b"", raw)
    if len(cleaned) % 2:
        cleaned = cleaned[:-1]
    return bytes.fromhex(cleaned.decode("ascii"))


def hex_pair_encode(data: bytes) -> str:
    return data.hex()


def mod_shift(data: bytes, n: int) -> bytes:
    """Add *n* to every byte modulo 256 (negative *n* subtracts)."""
    return bytes((b + n) % 256 for b in data)


def xor_repeat(data: bytes, key: bytes) -> bytes:
    """XOR *data* against *key* repeated to the data length."""
    if not key:
        raise ValueError("xor key must not be empty")
    size = len(key)
    return bytes(b ^ key[i % size] for i, b in enumerate(data))


def xor_feedback_decode(data: bytes, key: bytes) -> bytes:
    """Decode self-synchronizing feedback XOR.

    The effective key byte at position *i* is ``key[i % len(key)] ^ running``
    where ``running`` accumulates (by XOR) every plaintext byte decoded so
    far. Decoding is strictly left to right.
    """
    if not key:
        raise ValueError("xor key must not be empty")
    size = len(key)
    running = 0
    out = bytearray(len(data))
    for i, b in enumerate(data):
        plain = b ^ key[i % size] ^ running
        out[i] = plain
        running ^= plain
    return bytes(out)


def xor_feedback_encode(data: bytes, key: bytes) -> bytes:
    """Inverse of :func:`xor_feedback_decode`."""
    if not key:
        raise ValueError("xor key must not be empty")
    size = len(key)
    running = 0
    out = bytearray(len(data))
    for i, plain in enumerate(data):
        out[i] = plain ^ key[i % size] ^ running
        running ^= plain
    return bytes(out)


def rotate_letters(data: bytes, n: int) -> bytes:
    """ROT-*n* over ASCII letters, case preserved; other bytes untouched."""
    out = bytearray(data)
    for i, b in enumerate(out):
        if 0x41 <= b <= 0x5A:
            out[i] = 0x41 + (b - 0x41 + n) % 26
        elif 0x61 <= b <= 0x7A:
            out[i] = 0x61 + (b - 0x61 + n) % 26
    return bytes(out)


_STANDARD_B64_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)

# Shuffled alphabet used by PlayerJS-style ``#0``/``#1`` payloads.
PLAYERJS_ALPHABET = "ABCDEFGHIJKLMabcdefghijklmNOPQRSTUVWXYZnopqrstuvwxyz0123456789+/"


def custom_alphabet_b64_decode(
    data: str | bytes, alphabet: str = PLAYERJS_ALPHABET
) -> bytes:
    """Base64-decode text written in a permuted 64-character alphabet."""
    if len(alphabet) != 64 or len(set(alphabet)) != 64:
        raise ValueError("alphabet must hold 64 distinct characters")
    table = str.maketrans(alphabet, _STANDARD_B64_ALPHABET)
    text = _as_text(data).strip().rstrip("=")
    if any(ch not in alphabet for ch in text):
        raise ValueError("character outside custom alphabet")
    return url_safe_b64_decode(text.translate(table))


def custom_alphabet_b64_encode(data: bytes, alphabet: str = PLAYERJS_ALPHABET) -> str:
    table = str.maketrans(_STANDARD_B64_ALPHABET, alphabet)
    return base64.b64encode(data).decode("ascii").translate(table)
