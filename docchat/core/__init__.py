"""Core domain logic: completion client, realtime channel, exceptions."""
