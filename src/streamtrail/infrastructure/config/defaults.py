"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "streamtrail",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "user_agent": None,  # None = built-in browser User-Agent
        "max_connections": 20,
        "max_keepalive_connections": 10,
        "max_retries": 2,
        "backoff_base": 1.0,
    },
    "rate_limit": {
        "rps": 5.0,
        "burst": 10,
        "adaptive": True,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "cache": {
        "ttl_seconds": 600,
        "max_size": 1024,
    },
    "resolver": {
        "deadline_seconds": 45.0,
        "max_hops": 6,
        "max_concurrent_requests": 4,
        "default_provider": "vidsrc",
    },
    "validator": {
        "min_length": 20,
        "min_printable_ratio": 0.95,
        "excluded_host_prefixes": ["app2.", "app3."],
    },
    "providers": {
        "vidsrc": {
            "embed_base_url": "https://vidsrc-embed.ru",
            "player_host": "cloudnestra.com",
            "placeholder_domains": {
                "v1": "shadowlandschronicles.com",
                "v2": "shadowlandschronicles.com",
                "v3": "shadowlandschronicles.com",
                "v4": "shadowlandschronicles.com",
            },
        },
        "rapidshare": {
            "embed_base_url": "https://rapidshare.cc",
        },
        "flixer": {
            "embed_base_url": "https://flixer.su",
        },
    },
}
