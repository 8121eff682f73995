"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_document_service,
    get_service_cache,
    get_session_manager,
)

__all__ = [
    "ServiceCache",
    "get_document_service",
    "get_service_cache",
    "get_session_manager",
]
