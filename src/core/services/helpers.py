"""Small helpers shared by the service layer and the CLI."""

from __future__ import annotations


def check_push_prerequisites(
    *,
    store_label: str,
    configured: bool,
    identifier_label: str,
    identifier: str | None,
    has_data: bool,
    data_path: str | None = None,
) -> str | None:
    """Return a skip message for the first unmet prerequisite, or None.

    Checked in order: store configuration, identifier, local data.
    """

    if not configured:
        return f"⏭️  Skipping {store_label}: not configured (set credentials in the .env or secrets/aso-config.json)"
    if not identifier:
        return f"⏭️  Skipping {store_label}: no {identifier_label} provided"
    if not has_data:
        where = f" at {data_path}" if data_path else ""
        return f"⏭️  Skipping {store_label}: no data found{where}"
    return None
