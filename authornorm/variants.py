"""Alternate-rendering generation for parsed names.

Produces a bounded, deterministic set of plausible renderings of one
name: initials forms, the expanded form, particle-attached/detached
surnames, and "First Last" / "Last, First" reorderings.
"""

import logging

from authornorm.models import ParsedName, Variant, VariantKind
from authornorm.parser import NameParser, given_name_initials

logger = logging.getLogger(__name__)

DEFAULT_MAX_VARIANTS = 20


def _join(*parts: str | None) -> str:
    return " ".join(p for p in parts if p)


class VariantGenerator:
    """Generate alternate renderings of a name.

    Strategies run in a fixed order (initials, expanded, particle
    variants, reorderings) and duplicates keep their first occurrence,
    so identical input always yields the identical sequence.
    """

    def __init__(
        self,
        parser: NameParser | None = None,
        max_variants: int = DEFAULT_MAX_VARIANTS,
    ) -> None:
        self.parser = parser or NameParser()
        self.max_variants = max_variants

    def generate_variants(self, name: str | ParsedName) -> list[Variant]:
        """Generate variants for a raw name or an already-parsed name.

        Args:
            name: Raw name string or ParsedName.

        Returns:
            Deduplicated variants, at most ``max_variants`` long;
            non-empty for any non-empty name.
        """
        parsed = (
            name if isinstance(name, ParsedName) else self.parser.parse(name)
        )
        if parsed.is_empty:
            return []

        variants: list[Variant] = []
        seen: set[str] = set()
        for kind, texts in (
            (VariantKind.INITIALS, self._initials_forms(parsed)),
            (VariantKind.EXPANDED, self._expanded_forms(parsed)),
            (VariantKind.PARTICLE_VARIANT, self._particle_forms(parsed)),
            (VariantKind.REORDERED, self._reordered_forms(parsed)),
        ):
            for text in texts:
                if text and text not in seen:
                    seen.add(text)
                    variants.append(Variant(text=text, kind=kind))

        if len(variants) > self.max_variants:
            logger.debug(
                "Truncating %d variants of %r to %d",
                len(variants),
                parsed.original,
                self.max_variants,
            )
        return variants[: self.max_variants]

    def _initials_forms(self, parsed: ParsedName) -> list[str]:
        letters = given_name_initials(parsed.first_name)
        if not letters or not parsed.last_name:
            return []
        spaced = " ".join(f"{c}." for c in letters)
        compact = "".join(f"{c}." for c in letters)
        first_only = f"{letters[0]}."
        last = parsed.last_name
        return [
            _join(spaced, last),
            _join(compact, last),
            _join(first_only, last),
            f"{last}, {spaced}",
            f"{last}, {first_only}",
        ]

    def _expanded_forms(self, parsed: ParsedName) -> list[str]:
        # No dictionary of full given names: this only reformats.
        return [parsed.full_name]

    def _particle_forms(self, parsed: ParsedName) -> list[str]:
        if not parsed.particles:
            return []
        base = parsed.base_surname
        detached = " ".join(parsed.particles)
        first = parsed.first_name
        forms: list[str] = []
        if first:
            forms.extend(
                [
                    _join(first, parsed.last_name),
                    _join(first, base),
                    f"{base}, {first} {detached}",
                    f"{base}, {first}",
                ]
            )
        forms.extend([parsed.last_name, base])
        return forms

    def _reordered_forms(self, parsed: ParsedName) -> list[str]:
        if not parsed.first_name or not parsed.last_name:
            return []
        natural = _join(parsed.first_name, parsed.last_name, parsed.suffix)
        inverted = f"{parsed.last_name}, {parsed.first_name}"
        if parsed.suffix:
            inverted = f"{inverted}, {parsed.suffix}"
        return [natural, inverted]
