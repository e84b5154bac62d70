"""Learning paths: ordered course sequences with unlock cascade."""
