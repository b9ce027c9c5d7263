from .resolve_stream import ResolveStreamUseCase, StreamResolver

__all__ = ["ResolveStreamUseCase", "StreamResolver"]
