"""Realtime channel protocol."""

from .channel import ChannelState, EnvelopeSink, RealtimeChannel, parse_envelope

__all__ = ["ChannelState", "EnvelopeSink", "RealtimeChannel", "parse_envelope"]
