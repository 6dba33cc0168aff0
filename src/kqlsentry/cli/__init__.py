"""Command-line interface for KQLSentry."""
