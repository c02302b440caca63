"""Domain models and value types.

Why:
- Pure, strict data structures (Pydantic v2) plus the result envelopes.
- The domain knows nothing about HTTP, the CLI or vendor SDKs.
"""
