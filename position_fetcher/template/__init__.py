"""Position-fetcher templates."""
