"""Relay services used by the Lambda handlers."""
