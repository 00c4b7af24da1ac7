"""Lambda entrypoints."""
