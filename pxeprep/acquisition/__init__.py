"""Boot asset downloads."""
