"""
Exception hierarchy for the document chat service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DocChatError(Exception):
    """Base exception for all docchat errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(DocChatError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotFoundError(DocChatError):
    """Raised when a referenced entity does not exist."""


class DocumentNotFoundError(NotFoundError):
    """Raised when a document cannot be found."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        self.document_id = document_id
        super().__init__("Document not found", details)


class SessionNotFoundError(NotFoundError):
    """Raised when a chat session cannot be found."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["session_id"] = session_id
        self.session_id = session_id
        super().__init__("Chat session not found", details)


class ExtractionError(DocChatError):
    """Raised when PDF text extraction fails."""

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            filename: Name of the file that failed extraction
            details: Additional context
        """
        details = details or {}
        if filename:
            details["filename"] = filename
        super().__init__(message, details)


class CompletionError(DocChatError):
    """Base exception for generative-text backend failures."""


class ConfigurationError(CompletionError):
    """Raised when the completion backend is not configured."""


class BackendError(CompletionError):
    """Raised when the remote call fails, returns an error status, or times out."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize backend error.

        Args:
            message: Error message
            operation: Operation that failed (complete, summarize, questions)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class ResponseFormatError(CompletionError):
    """Raised when the backend reply payload is absent or malformed."""


class ChannelError(DocChatError):
    """Base exception for realtime channel protocol errors."""


class EnvelopeError(ChannelError):
    """Raised when an inbound envelope cannot be parsed or is incomplete."""


class SessionBindingError(ChannelError):
    """Raised when a connection tries to switch to a different session."""

    def __init__(self, bound_session_id: str, requested_session_id: str) -> None:
        super().__init__(
            "Connection is already bound to another chat session",
            {"bound_session_id": bound_session_id, "requested_session_id": requested_session_id},
        )
