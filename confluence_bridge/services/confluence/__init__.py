"""Confluence storage-format processing and REST access."""
