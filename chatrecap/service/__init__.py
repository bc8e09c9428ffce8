"""Presentation layer (interactive CLI)."""
