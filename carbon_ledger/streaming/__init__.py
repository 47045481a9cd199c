from .manager import StreamManager

__all__ = ["StreamManager"]
