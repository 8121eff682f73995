"""Boundary adapters: record store and PDF extraction."""
