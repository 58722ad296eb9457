"""Presentation helpers for analytics results (plain-text tables)."""
