"""Capability protocols for the host library and optional collaborators.

Any host object satisfying these protocols is accepted; authornorm never
depends on host classes directly.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from authornorm.models import Creator, ParsedName


@runtime_checkable
class CreatorLike(Protocol):
    """Minimal creator record exposed by the host library."""

    first_name: str
    last_name: str
    creator_type: str


@runtime_checkable
class ItemLike(Protocol):
    """A library item carrying creator records."""

    creators: Sequence[CreatorLike]


class CreatorUpdater(Protocol):
    """Host-side collaborator that writes accepted normalizations back."""

    def update_creator(self, original: Creator, normalized: Creator) -> None:
        """Replace ``original`` with ``normalized`` in the host library.

        Args:
            original: Creator as it was read from the library.
            normalized: Creator carrying the accepted name.
        """
        ...


class NameStructurer(Protocol):
    """Pluggable name analyzer (e.g. an NER model) ahead of the parser."""

    def analyze(
        self, raw_name: str
    ) -> ParsedName | Mapping[str, Any] | None:
        """Structure a raw name.

        Args:
            raw_name: Raw author name.

        Returns:
            A ParsedName, a mapping of ParsedName fields, or None to
            defer to the rule-based parser.
        """
        ...
