"""Points ledger and the fire-and-forget side-effect hooks."""
