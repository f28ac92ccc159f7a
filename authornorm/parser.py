"""Rule-based structural parsing of personal names.

Splits a raw author string into given names, surname (with particles),
suffix, and initials. Parsing never fails; unusual input degrades to a
best-effort segmentation.
"""

import logging
import re
from collections.abc import Iterable

from authornorm.models import ParsedName
from authornorm.normalize import collapse_whitespace

logger = logging.getLogger(__name__)

PARTICLES = frozenset(
    {
        "van",
        "von",
        "de",
        "la",
        "le",
        "lo",
        "del",
        "della",
        "der",
        "den",
        "di",
        "da",
        "das",
        "dos",
        "do",
        "du",
        "des",
        "ter",
        "ten",
        "el",
        "al",
        "st",
    }
)

SUFFIXES = frozenset({"jr", "sr", "ii", "iii", "iv", "phd", "md", "esq"})

# "J", "J.", "J.A.", "J.-P."
_INITIALS_TOKEN = re.compile(r"^(?:[^\W\d_]\.-?)+$")


class NameParser:
    """Parse raw name strings into :class:`ParsedName` objects."""

    def __init__(
        self,
        extra_particles: Iterable[str] = (),
        extra_suffixes: Iterable[str] = (),
    ) -> None:
        """Initialize the parser.

        Args:
            extra_particles: Additional surname particles to recognize.
            extra_suffixes: Additional generational/degree suffixes.
        """
        self.particles = PARTICLES | {p.lower() for p in extra_particles}
        self.suffixes = SUFFIXES | {
            s.lower().rstrip(".") for s in extra_suffixes
        }

    def is_particle(self, token: str) -> bool:
        return token.lower() in self.particles

    def is_suffix(self, token: str) -> bool:
        return token.lower().rstrip(".") in self.suffixes

    def parse(self, raw: str | None) -> ParsedName:
        """Parse a raw name string.

        Accepts "First Last", "Last, First" and multi-token names with
        abbreviation dots.

        Args:
            raw: Raw name string.

        Returns:
            ParsedName; all fields empty for empty input.
        """
        original = raw or ""
        text = collapse_whitespace(original).rstrip(", ").strip()
        if not text:
            return ParsedName(original=original)

        if "," in text:
            first, last, suffix = self._split_inverted(text)
        else:
            first, last, suffix = self._split_natural(text.split())

        return self._build(first, last, suffix, original)

    def parse_creator(
        self, first_name: str | None, last_name: str | None
    ) -> ParsedName:
        """Parse a creator record without re-splitting its fields.

        Particles and suffixes are still detected inside ``last_name``.
        When only one field is filled, it is parsed as a full name.

        Args:
            first_name: Given name(s) from the record.
            last_name: Family name from the record.

        Returns:
            ParsedName built from the record.
        """
        first = collapse_whitespace(first_name)
        last = collapse_whitespace(last_name)
        original = " ".join(p for p in (first, last) if p)
        if not first or not last:
            parsed = self.parse(first or last)
            return parsed.model_copy(update={"original": original})

        tokens = last.split()
        suffix_tokens: list[str] = []
        while len(tokens) > 1 and self.is_suffix(tokens[-1]):
            suffix_tokens.insert(0, tokens.pop())
        suffix = " ".join(suffix_tokens) or None
        return self._build(first, " ".join(tokens), suffix, original)

    def _split_inverted(self, text: str) -> tuple[str, str, str | None]:
        """Split "Last, First[, Suffix]" into its parts."""
        segments = [s.strip() for s in text.split(",")]
        last = segments[0]
        rest = [s for s in segments[1:] if s]

        suffix_tokens: list[str] = []
        while rest and all(self.is_suffix(t) for t in rest[-1].split()):
            suffix_tokens[:0] = rest.pop().split()

        given = " ".join(rest).split()
        while len(given) > 1 and self.is_suffix(given[-1]):
            suffix_tokens.insert(0, given.pop())

        # "Vega, Sancho de la": particles trailing the given names belong
        # in front of the surname.
        moved: list[str] = []
        while len(given) > 1 and self.is_particle(given[-1]):
            moved.insert(0, given.pop())
        if moved:
            last = " ".join(moved + [last])

        if not last and given:
            return self._split_natural(given)
        return " ".join(given), last, " ".join(suffix_tokens) or None

    def _split_natural(self, tokens: list[str]) -> tuple[str, str, str | None]:
        """Split "First [Middle] [particles] Last [Suffix]"."""
        tokens = list(tokens)
        suffix_tokens: list[str] = []
        while len(tokens) > 1 and self.is_suffix(tokens[-1]):
            suffix_tokens.insert(0, tokens.pop())
        suffix = " ".join(suffix_tokens) or None

        if len(tokens) == 1:
            return "", tokens[0], suffix

        head = len(tokens) - 1
        start = head
        while start > 0 and self.is_particle(tokens[start - 1]):
            start -= 1
        # A capitalized leading particle is a given name ("Al Gore").
        if start == 0 and tokens[0][:1].isupper():
            start = 1
            while start < head and not self.is_particle(tokens[start]):
                start += 1

        return " ".join(tokens[:start]), " ".join(tokens[start:]), suffix

    def _build(
        self, first: str, last: str, suffix: str | None, original: str
    ) -> ParsedName:
        last_tokens = last.split()
        particles: list[str] = []
        for token in last_tokens[:-1]:
            if not self.is_particle(token):
                break
            particles.append(token)

        parsed = ParsedName(
            first_name=first,
            last_name=last,
            particles=tuple(particles),
            suffix=suffix,
            initials=tuple(extract_initials(first)),
            original=original,
        )
        logger.debug("Parsed %r as %r", original, parsed)
        return parsed


def is_initial_token(token: str) -> bool:
    """True for "J", "J." and compact runs such as "J.A." or "J.-P."."""
    if len(token) == 1:
        return token.isalpha()
    return token.endswith(".") and bool(_INITIALS_TOKEN.match(token))


def extract_initials(first_name: str) -> list[str]:
    """Derive initials from the abbreviated tokens of a given-name string.

    Only tokens that end in "." or are a single letter contribute; a
    compact run such as "J.A." contributes every letter.

    Args:
        first_name: Given-name string.

    Returns:
        Uppercase initial letters in order.
    """
    initials: list[str] = []
    for token in first_name.split():
        if len(token) == 1 and token.isalpha():
            initials.append(token.upper())
        elif token.endswith("."):
            if is_initial_token(token):
                initials.extend(c.upper() for c in token if c.isalpha())
            else:
                # Abbreviated name such as "Wm." or "Th."
                initials.append(token[0].upper())
    return initials


def given_name_initials(first_name: str) -> list[str]:
    """One uppercase letter per given name; every letter of "J.A." runs.

    Unlike :func:`extract_initials`, full given names contribute too
    ("Jerry A." -> ["J", "A"]).
    """
    letters: list[str] = []
    for token in first_name.split():
        if is_initial_token(token):
            letters.extend(c.upper() for c in token if c.isalpha())
        elif token[:1].isalpha():
            letters.append(token[0].upper())
    return letters
