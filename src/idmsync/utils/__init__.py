"""Helpers: export bundle files and script hook validation."""
