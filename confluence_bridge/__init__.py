"""Confluence bridge — CQL search, page reads and versioned page updates as agent tools."""

__version__ = "0.1.0"
