"""Packaged JSON schemas for input documents."""
