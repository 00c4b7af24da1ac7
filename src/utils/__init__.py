"""Shared helpers: logging, errors, lazy cells."""
