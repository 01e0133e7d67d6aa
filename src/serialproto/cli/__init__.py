"""Command-line interface for serialproto."""
