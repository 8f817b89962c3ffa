"""CLI package for pocketbook."""
