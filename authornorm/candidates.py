"""Library-wide detection of likely name variants.

Pairs surnames whose Jaro-Winkler similarity clears an acceptance
threshold, and pairs given-name renderings ("J." / "Jerry") that share a
surname. Both passes are pure and side-effect free, so a caller may
abandon them at any point.

Pairwise comparison is O(n^2) in the number of distinct surnames, which
is fine for libraries in the low thousands. Optional phonetic blocking
only compares surnames sharing a Soundex code, trading recall for speed.
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable, Iterator, Mapping
from itertools import combinations

from authornorm.interfaces import CreatorLike
from authornorm.models import CandidatePair, GivenNameVariant
from authornorm.normalize import collapse_whitespace, surname_key
from authornorm.parser import given_name_initials, is_initial_token
from authornorm.similarity import (
    initial_compatible,
    jaro_winkler,
    levenshtein_ratio,
    phonetic_key,
)

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.80
DEFAULT_INITIAL_THRESHOLD = 0.70
DEFAULT_GIVEN_NAME_THRESHOLD = 0.60


def _given_names_compatible(first: str, second: str) -> bool:
    """True if one given-name string abbreviates the other.

    At least one side must contain an initial, and the shorter initials
    sequence must be a prefix of the longer ("J." / "Jerry A.").
    """
    tokens = first.split() + second.split()
    if not any(is_initial_token(t) for t in tokens):
        return False
    a = given_name_initials(first)
    b = given_name_initials(second)
    if not a or not b:
        return False
    shorter, longer = sorted((a, b), key=len)
    return longer[: len(shorter)] == shorter


class CandidateFinder:
    """Find pairs of names likely to denote the same person."""

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        initial_threshold: float = DEFAULT_INITIAL_THRESHOLD,
        given_name_threshold: float = DEFAULT_GIVEN_NAME_THRESHOLD,
        phonetic_blocking: bool = False,
    ) -> None:
        """Initialize the finder.

        Args:
            threshold: Minimum Jaro-Winkler similarity for a pair.
            initial_threshold: Lower bar for initial-compatible pairs.
            given_name_threshold: Minimum Levenshtein ratio for given
                names under one surname.
            phonetic_blocking: Only compare surnames with equal
                Soundex codes.
        """
        self.threshold = threshold
        self.initial_threshold = initial_threshold
        self.given_name_threshold = given_name_threshold
        self.phonetic_blocking = phonetic_blocking

    def find_potential_variants(
        self,
        surnames: Iterable[str],
        frequencies: Mapping[str, int] | None = None,
    ) -> list[CandidatePair]:
        """Find surname pairs that are probably variants of each other.

        Surnames are compared case-insensitively; the first-seen spelling
        is reported.

        Args:
            surnames: Surnames (repeats count as occurrences).
            frequencies: Optional explicit counts, keyed by surname or
                its lowercase form. Defaults to occurrence counts.

        Returns:
            Pairs sorted by descending similarity, ties broken by
            descending combined frequency. Empty when nothing matches.
        """
        counts: Counter[str] = Counter()
        display: dict[str, str] = {}
        for surname in surnames:
            name = collapse_whitespace(surname)
            if not name:
                continue
            key = name.casefold()
            display.setdefault(key, name)
            counts[key] += 1

        names = list(display.values())

        def frequency(name: str) -> int:
            if frequencies:
                count = frequencies.get(name)
                if count is None:
                    count = frequencies.get(name.casefold())
                if count is not None:
                    return max(int(count), 1)
            return counts[name.casefold()]

        pairs: list[CandidatePair] = []
        comparisons = 0
        for name1, name2 in self._comparisons(names):
            comparisons += 1
            similarity = jaro_winkler(name1, name2)
            if similarity >= self.threshold or (
                similarity >= self.initial_threshold
                and initial_compatible(name1, name2)
            ):
                pairs.append(
                    CandidatePair(
                        name1=name1,
                        name2=name2,
                        frequency1=frequency(name1),
                        frequency2=frequency(name2),
                        similarity=similarity,
                    )
                )

        pairs.sort(
            key=lambda p: (
                -p.similarity,
                -p.combined_frequency,
                p.name1.casefold(),
                p.name2.casefold(),
            )
        )
        logger.info(
            "Compared %d surname pairs across %d surnames, found %d "
            "potential variants",
            comparisons,
            len(names),
            len(pairs),
        )
        return pairs

    def _comparisons(self, names: list[str]) -> Iterator[tuple[str, str]]:
        """Yield unordered name pairs, in input order."""
        if not self.phonetic_blocking:
            yield from combinations(names, 2)
            return

        buckets: dict[str, list[str]] = defaultdict(list)
        for name in names:
            buckets[phonetic_key(name)].append(name)
        for bucket in buckets.values():
            yield from combinations(bucket, 2)

    def find_given_name_variants(
        self, creators: Iterable[CreatorLike]
    ) -> list[GivenNameVariant]:
        """Find given-name renderings of one surname that likely match.

        Args:
            creators: Creator records; repeats count as occurrences.

        Returns:
            Variant pairs, most frequent first.
        """
        by_surname: dict[str, Counter[str]] = defaultdict(Counter)
        surname_display: dict[str, str] = {}
        given_display: dict[tuple[str, str], str] = {}

        for creator in creators:
            surname = collapse_whitespace(creator.last_name)
            given = collapse_whitespace(creator.first_name)
            if not surname or not given:
                continue
            skey = surname_key(surname)
            gkey = given.casefold()
            surname_display.setdefault(skey, surname)
            given_display.setdefault((skey, gkey), given)
            by_surname[skey][gkey] += 1

        variants: list[GivenNameVariant] = []
        for skey, given_counts in by_surname.items():
            for gkey1, gkey2 in combinations(given_counts, 2):
                given1 = given_display[(skey, gkey1)]
                given2 = given_display[(skey, gkey2)]
                similarity = levenshtein_ratio(given1, given2)
                if similarity < self.given_name_threshold and not (
                    _given_names_compatible(given1, given2)
                ):
                    continue
                variants.append(
                    GivenNameVariant(
                        surname=surname_display[skey],
                        given_name1=given1,
                        frequency1=given_counts[gkey1],
                        given_name2=given2,
                        frequency2=given_counts[gkey2],
                        similarity=similarity,
                    )
                )

        variants.sort(
            key=lambda v: (
                -v.combined_frequency,
                v.surname.casefold(),
                v.given_name1.casefold(),
                v.given_name2.casefold(),
            )
        )
        return variants


def find_canonical_forms(
    variants: Iterable[GivenNameVariant],
) -> dict[str, str]:
    """Map each variant's lowercase full name to its canonical form.

    The canonical form uses the more frequent given name. When a name
    appears in several pairs, the first (most frequent) pair wins.

    Args:
        variants: Given-name variant pairs, most frequent first.

    Returns:
        Mapping of lowercase "given surname" to canonical "Given Surname".
    """
    canonical: dict[str, str] = {}
    for variant in variants:
        target = f"{variant.recommended} {variant.surname}"
        for given in (variant.given_name1, variant.given_name2):
            key = f"{given} {variant.surname}".lower()
            canonical.setdefault(key, target)
    return canonical
