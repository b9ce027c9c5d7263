from .api import ResolveRequestBody, ResolveResponseBody, handle_resolve
from .composition import build_http_client, build_stream_resolver, create_resolver

__all__ = [
    "ResolveRequestBody",
    "ResolveResponseBody",
    "build_http_client",
    "build_stream_resolver",
    "create_resolver",
    "handle_resolve",
]
