"""Domain entities and API schemas."""
