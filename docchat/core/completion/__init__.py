"""Generative-text completion client."""

from .completion_client import CHAT_FALLBACK, SUMMARY_FALLBACK, CompletionClient

__all__ = ["CHAT_FALLBACK", "SUMMARY_FALLBACK", "CompletionClient"]
