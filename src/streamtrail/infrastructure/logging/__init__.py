from .redaction import redact_secrets
from .setup import configure_logging

__all__ = ["configure_logging", "redact_secrets"]
