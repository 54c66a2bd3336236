"""Environment configuration: loading, validation and context."""
