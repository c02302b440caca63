"""Locale fan-out for a single edited field.

One source text (typically release notes) is mapped onto every locale each
store listing supports. This module never invents placeholder text: locales
without a translation are reported, not filled.
"""

from __future__ import annotations

import logging

from core.domain.errors import TranslationUnavailableError
from core.domain.models import (
    DistributionResult,
    RegisteredApp,
    StoreTranslations,
    TranslationRequest,
)
from core.domain.store import DEFAULT_LOCALE, Store
from core.interfaces.translator import Translator

logger = logging.getLogger(__name__)

_CONCRETE_STORES = (Store.APP_STORE, Store.GOOGLE_PLAY)


def collect_supported_locales(app: RegisteredApp, store: Store) -> dict[Store, list[str]]:
    """Supported locales per concrete store; stores outside `store` are empty."""

    listings = {Store.APP_STORE: app.app_store, Store.GOOGLE_PLAY: app.google_play}
    out: dict[Store, list[str]] = {}
    for concrete in _CONCRETE_STORES:
        listing = listings[concrete]
        if store.includes(concrete) and listing is not None:
            out[concrete] = list(listing.supported_locales)
        else:
            out[concrete] = []
    return out


def create_translation_requests(
    app: RegisteredApp,
    source_text: str,
    source_locale: str = DEFAULT_LOCALE,
    store: Store = Store.BOTH,
) -> dict[Store, TranslationRequest]:
    """One request per store that supports any locale.

    A request with no target locales is still emitted when the source locale
    itself is supported, so the source copy is tracked too.
    """

    requests: dict[Store, TranslationRequest] = {}
    for concrete, locales in collect_supported_locales(app, store).items():
        if not locales:
            continue
        targets = [locale for locale in locales if locale != source_locale]
        if targets or source_locale in locales:
            requests[concrete] = TranslationRequest(
                source_text=source_text,
                source_locale=source_locale,
                target_locales=targets,
                store=concrete,
            )
    return requests


def separate_translations_by_store(
    translations: dict[str, str],
    app: RegisteredApp,
    source_locale: str,
    store: Store,
) -> StoreTranslations:
    """Split a flat locale -> text map into per-store maps.

    For each supported locale: the exact translation if present, else the
    source-locale text when the locale is the source locale. Anything else
    is omitted.
    """

    per_store: dict[Store, dict[str, str]] = {}
    for concrete, locales in collect_supported_locales(app, store).items():
        selected: dict[str, str] = {}
        for locale in locales:
            if translations.get(locale):
                selected[locale] = translations[locale]
            elif locale == source_locale and translations.get(source_locale):
                selected[locale] = translations[source_locale]
        per_store[concrete] = selected
    return StoreTranslations(
        app_store=per_store[Store.APP_STORE],
        google_play=per_store[Store.GOOGLE_PLAY],
    )


def find_missing_locales(
    translations: dict[str, str],
    app: RegisteredApp,
    source_locale: str,
    store: Store,
) -> dict[Store, list[str]]:
    """Supported locales that `separate_translations_by_store` would omit."""

    separated = separate_translations_by_store(translations, app, source_locale, store)
    missing: dict[Store, list[str]] = {}
    for concrete, locales in collect_supported_locales(app, store).items():
        covered = separated.for_store(concrete)
        gaps = [locale for locale in locales if locale not in covered]
        if gaps:
            missing[concrete] = gaps
    return missing


async def distribute_translation(
    app: RegisteredApp,
    source_text: str,
    translator: Translator,
    source_locale: str = DEFAULT_LOCALE,
    store: Store = Store.BOTH,
) -> DistributionResult:
    """Translate `source_text` into every target locale and split by store.

    Each distinct locale is translated once, sequentially. A translator that
    raises `TranslationUnavailableError` leaves that locale missing.
    """

    requests = create_translation_requests(app, source_text, source_locale, store)

    targets: list[str] = []
    for request in requests.values():
        for locale in request.target_locales:
            if locale not in targets:
                targets.append(locale)

    translations: dict[str, str] = {source_locale: source_text}
    for locale in targets:
        try:
            text = await translator.translate(
                source_text,
                source_locale=source_locale,
                target_locale=locale,
            )
        except TranslationUnavailableError as exc:
            logger.warning("%s", exc)
            continue
        if text and text.strip():
            translations[locale] = text.strip()

    return DistributionResult(
        translations=separate_translations_by_store(translations, app, source_locale, store),
        missing=find_missing_locales(translations, app, source_locale, store),
    )
