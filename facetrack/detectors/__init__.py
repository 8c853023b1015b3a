"""Object detector adapters."""
