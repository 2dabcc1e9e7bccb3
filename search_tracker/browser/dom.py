"""Minimal DOM surface used by click tracking."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class Element(Protocol):
    """An element of the host document."""

    def get_attribute(self, name: str) -> str | None: ...

    def closest(self, selector: str) -> Element | None:
        """Return the nearest inclusive ancestor matching *selector*."""
        ...


class Document(Protocol):
    """The host document."""

    def query_selector_all(self, selector: str) -> Sequence[Element]:
        """Return matching elements in document order."""
        ...
