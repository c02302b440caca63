"""Service layer: orchestration returning result envelopes."""
