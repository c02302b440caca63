"""Authenticated transport contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- The resource locator and the metadata client depend on this, so tests can
  swap the real `httpx` session for an in-memory fake.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


@runtime_checkable
class Transport(Protocol):
    """Minimal authenticated REST surface.

    Design rules:
    - Every call is async because it performs network I/O.
    - Non-2xx responses raise `VendorRequestError` carrying status and body.
    - When `model` is given, the JSON body is validated into it before it is
      returned; validation happens here, not in business logic.
    """

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        model: type[M] | None = None,
    ) -> Any: ...

    async def post(self, path: str, body: Any, *, model: type[M] | None = None) -> Any: ...

    async def patch(self, path: str, body: Any) -> None: ...
