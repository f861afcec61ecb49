"""Shared parsing and logging utilities."""
