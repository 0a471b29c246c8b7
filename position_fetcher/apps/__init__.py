"""App products."""
