"""structlog processor that keeps tokens and keys out of production logs."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

SECRET_KEYS = frozenset({"token", "raw_token", "key", "derived_key", "secret"})
# Hop URLs carry the extracted hash in their path.
URL_KEYS = frozenset({"url", "page_url", "link", "referer"})
REDACTED = "[redacted]"


def mask_url(url: str) -> str:
    """Keep scheme, host and the leading path marker; mask the rest.

    ``https://cloudnestra.com/rcp/MzE0...`` becomes
    ``https://cloudnestra.com/rcp/[redacted]``.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return REDACTED
    if not parts.scheme or not parts.netloc:
        return REDACTED

    origin = f"{parts.scheme}://{parts.netloc}"
    segments = [s for s in parts.path.split("/") if s]
    if not segments and not parts.query:
        return origin
    marker = f"/{segments[0]}" if len(segments) > 1 else ""
    return f"{origin}{marker}/{REDACTED}"


def redact_secrets(_: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask secret-bearing fields on every event above DEBUG."""
    if method_name == "debug":
        return event_dict
    for key in SECRET_KEYS & event_dict.keys():
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    for key in URL_KEYS & event_dict.keys():
        if isinstance(event_dict[key], str):
            event_dict[key] = mask_url(event_dict[key])
    return event_dict
