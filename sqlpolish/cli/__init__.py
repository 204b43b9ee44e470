"""Command-line interface for sqlpolish."""
