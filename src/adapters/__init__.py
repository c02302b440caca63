"""Adapters: I/O against external stores (HTTP, vendor APIs)."""
