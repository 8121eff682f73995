"""Adapters between the application layer and boundaries."""

from .chat_history_adapter import ChatHistoryAdapter, to_langchain_message

__all__ = ["ChatHistoryAdapter", "to_langchain_message"]
