"""Command-line entry points: indexsense-indexes and indexsense-sql."""
