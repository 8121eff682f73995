"""Service orchestrators."""

from .document_service import DocumentService
from .session_manager import SessionManager

__all__ = [
    "DocumentService",
    "SessionManager",
]
