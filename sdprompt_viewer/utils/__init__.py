"""Parsing and reading utilities."""
