"""Command groups for the sqlpolish CLI."""
