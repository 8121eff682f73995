"""API routers."""

from .chat_stream import router as chat_stream_router
from .documents import router as documents_router
from .health import router as health_router

__all__ = [
    "chat_stream_router",
    "documents_router",
    "health_router",
]
