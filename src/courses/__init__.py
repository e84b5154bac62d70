"""Read-only course catalog."""
