"""Shared helpers for time handling and size parsing."""
