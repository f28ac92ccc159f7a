"""Shared text normalization utilities for authornorm.

Used by the parser, the learning store, and library analysis for
consistent case and whitespace handling across the codebase.
"""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_KEY_PUNCTUATION = re.compile(r"[.,]")


def collapse_whitespace(text: str | None) -> str:
    """Trim a string and collapse internal whitespace runs to one space.

    Args:
        text: Raw string, possibly None.

    Returns:
        Cleaned string ("" for None).
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def canonical_key(name: str | None) -> str:
    """Build the lookup key used for learned mappings.

    Lowercases, drops periods and commas, and collapses whitespace, so
    "J. Smith", "j smith" and " J.  Smith " share one key.

    Args:
        name: Raw name string.

    Returns:
        Canonical key, "" for empty input.
    """
    text = collapse_whitespace(name).lower()
    text = _KEY_PUNCTUATION.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def surname_key(surname: str | None) -> str:
    """Case-insensitive grouping key for a surname."""
    return collapse_whitespace(surname).lower()


def strip_accents(text: str) -> str:
    """Remove combining diacritical marks ("Dvořák" -> "Dvorak")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def build_full_name(first: str | None, last: str | None) -> str:
    """Join given and family name into a display string."""
    return collapse_whitespace(f"{first or ''} {last or ''}")
