"""Core of aso-sync: configuration, domain, interfaces and services.

Nothing in here performs HTTP directly; adapters do.
"""
