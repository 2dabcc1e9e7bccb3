"""Long-lived anonymous color identifier, e.g. ``#A1B2C3-#D4E5F6``."""

from __future__ import annotations

from search_tracker.browser import storage as storage_mod
from search_tracker.utils.randomness import RandomSource

_HEX_DIGITS = "0123456789ABCDEF"


def generate_random_color(random_source: RandomSource) -> str:
    """Return a random ``#RRGGBB`` color with uppercase hex digits."""
    return "#" + "".join(_HEX_DIGITS[random_source.randbelow(16)] for _ in range(6))


def get_or_create_color_identifier(storage: storage_mod.Storage, random_source: RandomSource) -> str:
    """Read the stored identifier, creating and persisting one when absent."""
    identifier = storage.get_item(storage_mod.COLOR_IDENTIFIER_KEY)
    if not identifier:
        identifier = f"{generate_random_color(random_source)}-{generate_random_color(random_source)}"
        storage.set_item(storage_mod.COLOR_IDENTIFIER_KEY, identifier)
    return identifier
