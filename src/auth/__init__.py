"""Caller identity, roles and the user directory."""
