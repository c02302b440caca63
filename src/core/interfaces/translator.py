"""Translation capability contract.

Translation generation is not part of this project; the locale distribution
engine receives an implementation of this Protocol from the caller.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Translator(Protocol):
    async def translate(self, text: str, *, source_locale: str, target_locale: str) -> str:
        """Return `text` translated into `target_locale`.

        Raise `TranslationUnavailableError` when the locale cannot be served;
        any other exception is treated as unexpected and propagates.
        """

        ...
