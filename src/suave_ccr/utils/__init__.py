"""Shared helpers for suave_ccr."""
