"""App Store Connect adapter.

Why a package:
- Groups the pieces that only make sense against App Store Connect:
  token issuance, JSON:API payload schemas, resource location and the
  metadata client.
"""

from adapters.app_store.auth import decode_token, issue_token
from adapters.app_store.client import AppStoreClient
from adapters.app_store.locator import ResourceLocator, compare_version_strings

__all__ = [
    "AppStoreClient",
    "ResourceLocator",
    "compare_version_strings",
    "decode_token",
    "issue_token",
]
