"""Store selectors shared across the application.

Kept in the domain layer so the CLI, the services and the locale
distribution engine share a single source of truth without importing
adapters.
"""

from __future__ import annotations

from enum import Enum

DEFAULT_LOCALE = "en-US"


class Store(str, Enum):
    """Which store listing(s) an operation targets."""

    APP_STORE = "appStore"
    GOOGLE_PLAY = "googlePlay"
    BOTH = "both"

    @classmethod
    def default(cls) -> "Store":
        return cls.BOTH

    def includes(self, other: "Store") -> bool:
        """True when this selector covers the concrete store `other`."""

        return self is Store.BOTH or self is other

    def label(self) -> str:
        """Human readable label for messages and logging."""

        if self is Store.APP_STORE:
            return "App Store"
        if self is Store.GOOGLE_PLAY:
            return "Google Play"
        return "App Store + Google Play"
