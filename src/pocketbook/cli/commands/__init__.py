"""CLI commands for pocketbook."""
