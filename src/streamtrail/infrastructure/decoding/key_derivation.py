"""Key derivation from token context.

Pure functions plus small strategy objects that read a
:class:`~streamtrail.domain.entities.TokenContext`. Identical inputs
always produce identical keys.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from streamtrail.domain.entities.resolution import TokenContext

_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")

SUPPORTED_HASHES = frozenset({"md5", "sha1", "sha256"})


class KeyDerivationError(ValueError):
    """Context is missing or unusable for the requested key."""


def normalize_context(value: str) -> str:
    """Keep only ASCII letters and digits, uppercased."""
    return _NON_ALNUM_RE.sub("", value).upper()


def static_context(
    value: str,
    *,
    normalize: bool = False,
    last: int | None = None,
    length: int | None = None,
) -> bytes:
    """Turn a context string into key bytes.

    Args:
        value: Div id, embed id or URL path segment.
        normalize: Strip non-alphanumerics and uppercase first.
        last: Keep only the last *last* characters.
        length: Repeat/truncate the result to exactly *length* bytes.
    """
    text = normalize_context(value) if normalize else value
    if last is not None:
        if last <= 0:
            raise KeyDerivationError("last must be > 0")
        text = text[-last:]
    if not text:
        raise KeyDerivationError("context is empty")

    raw = text.encode("utf-8")
    if length is None:
        return raw
    if length <= 0:
        raise KeyDerivationError("length must be > 0")
    repeats = -(-length // len(raw))
    return (raw * repeats)[:length]


def derived_hash(value: str, algo: str = "md5") -> bytes:
    """Hash a context string; the raw digest is the key."""
    if algo not in SUPPORTED_HASHES:
        raise KeyDerivationError(f"unsupported hash: {algo!r}")
    if not value:
        raise KeyDerivationError("context is empty")
    return hashlib.new(algo, value.encode("utf-8")).digest()


def composite_fingerprint(
    parts: Sequence[str],
    *,
    delimiter: str = "|",
    algo: str = "sha256",
) -> bytes:
    """Join ordered fingerprint fields with *delimiter* and hash them."""
    if not parts:
        raise KeyDerivationError("fingerprint needs at least one part")
    if algo not in SUPPORTED_HASHES:
        raise KeyDerivationError(f"unsupported hash: {algo!r}")
    joined = delimiter.join(str(p) for p in parts)
    return hashlib.new(algo, joined.encode("utf-8")).digest()


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _context_value(context: TokenContext, field_name: str) -> str:
    value = context.value_of(field_name)
    if not value:
        raise KeyDerivationError(f"context field {field_name!r} is empty")
    return value


@dataclass(frozen=True)
class NoKey:
    """Codec chain without keyed steps."""

    def derive(self, context: TokenContext) -> bytes:
        return b""


@dataclass(frozen=True)
class LiteralKey:
    """Fixed key baked into the codec definition."""

    value: str

    def derive(self, context: TokenContext) -> bytes:
        if not self.value:
            raise KeyDerivationError("literal key is empty")
        return self.value.encode("utf-8")


@dataclass(frozen=True)
class StaticContextKey:
    """Key taken from one context field (see :func:`static_context`)."""

    field: str = "div_id"
    normalize: bool = False
    last: int | None = None
    length: int | None = None
    reverse: bool = False

    def derive(self, context: TokenContext) -> bytes:
        value = _context_value(context, self.field)
        if self.reverse:
            value = value[::-1]
        return static_context(
            value, normalize=self.normalize, last=self.last, length=self.length
        )


@dataclass(frozen=True)
class DerivedHashKey:
    """Digest of one context field."""

    field: str = "embed_id"
    algo: str = "md5"
    normalize: bool = False

    def derive(self, context: TokenContext) -> bytes:
        value = _context_value(context, self.field)
        if self.normalize:
            value = normalize_context(value)
        return derived_hash(value, self.algo)


@dataclass(frozen=True)
class CompositeFingerprintKey:
    """Digest of several context fields joined in order."""

    fields: tuple[str, ...]
    delimiter: str = "|"
    algo: str = "sha256"

    def derive(self, context: TokenContext) -> bytes:
        parts = [_context_value(context, name) for name in self.fields]
        return composite_fingerprint(parts, delimiter=self.delimiter, algo=self.algo)


KeyStrategy = Union[
    NoKey, LiteralKey, StaticContextKey, DerivedHashKey, CompositeFingerprintKey
]
