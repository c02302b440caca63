"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Lets several commands reuse the same tables/panels.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import CanonicalMetadata, ReleaseNote, TranslationRequest
from core.domain.store import Store

_METADATA_FIELDS = (
    ("name", "Name"),
    ("subtitle", "Subtitle"),
    ("description", "Description"),
    ("keywords", "Keywords"),
    ("support_url", "Support URL"),
    ("marketing_url", "Marketing URL"),
    ("whats_new", "What's New"),
)


def print_banner(console: Console) -> None:
    title = Text("aso-sync", style="bold cyan")
    subtitle = Text("App Store / Google Play metadata sync", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _shorten(value: str, limit: int = 120) -> str:
    value = " ".join(value.split())
    return value if len(value) <= limit else value[: limit - 1] + "…"


def build_metadata_table(metadata: CanonicalMetadata) -> Table:
    table = Table(title="Listing Metadata")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Locale", style="magenta", no_wrap=True)
    table.add_column("Value", style="white")

    for attr, label in _METADATA_FIELDS:
        mapping = getattr(metadata, attr) or {}
        for locale, value in mapping.items():
            table.add_row(label, locale, _shorten(value))
    return table


def build_release_notes_table(notes: list[ReleaseNote]) -> Table:
    table = Table(title="Release Notes")
    table.add_column("Locale", style="magenta", no_wrap=True)
    table.add_column("What's New", style="white")
    for note in notes:
        table.add_row(note.locale, _shorten(note.text))
    return table


def build_translation_requests_table(requests: dict[Store, TranslationRequest]) -> Table:
    table = Table(title="Translation Requests")
    table.add_column("Store", style="cyan", no_wrap=True)
    table.add_column("Source", style="magenta", no_wrap=True)
    table.add_column("Targets", style="white")
    for store, request in requests.items():
        targets = ", ".join(request.target_locales) or "(source locale only)"
        table.add_row(store.label(), request.source_locale, targets)
    return table
