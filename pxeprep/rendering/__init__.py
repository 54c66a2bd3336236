"""Template rendering and artifact generation."""
