"""Shared router helpers."""

from .error_handling import handle_document_errors

__all__ = ["handle_document_errors"]
