"""Course and learning path certificates."""
