"""String-similarity scorers for name comparison.

Pure, case-insensitive functions built on ``rapidfuzz.distance``. The
numeric semantics differ per algorithm: Levenshtein distance is an
integer edit count, every ``*_ratio``/``jaro_winkler`` value is a
similarity in [0, 1], and ``initial_compatible`` is a predicate.
"""

import jellyfish
from rapidfuzz.distance import JaroWinkler, LCSseq, Levenshtein

from authornorm.models import Algorithm, SimilarityScore
from authornorm.normalize import strip_accents

# Winkler prefix scaling factor; rapidfuzz caps the prefix at 4 chars.
PREFIX_WEIGHT = 0.1


def _fold(text: str) -> str:
    return text.casefold()


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum single-character edits turning ``a`` into ``b``."""
    return Levenshtein.distance(_fold(a), _fold(b))


def levenshtein_ratio(a: str, b: str) -> float:
    """``1 - distance / max(len(a), len(b))``; 1.0 for two empty strings."""
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(_fold(a), _fold(b))


def jaro_winkler(a: str, b: str) -> float:
    """Jaro-Winkler similarity with a 0.1 prefix boost over 4 chars."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    value = JaroWinkler.similarity(
        _fold(a), _fold(b), prefix_weight=PREFIX_WEIGHT
    )
    return min(value, 1.0)


def lcs_ratio(a: str, b: str) -> float:
    """Longest common subsequence length over the longer folded length."""
    folded_a, folded_b = _fold(a), _fold(b)
    longest = max(len(folded_a), len(folded_b))
    if longest == 0:
        return 1.0
    return LCSseq.similarity(folded_a, folded_b) / longest


def _is_initial(token: str) -> bool:
    letters = token.rstrip(".")
    return len(letters) == 1 and letters.isalpha()


def initial_compatible(a: str, b: str) -> bool:
    """Check whether "J. Smith" and "John Smith" may be the same person.

    Both names need a leading token and a surname; surnames must match
    case-insensitively, one leading token must be a single initial, and
    the other leading token must start with that letter.

    Args:
        a: First name string ("Given ... Surname" order).
        b: Second name string.

    Returns:
        True if the names are initial-compatible.
    """
    tokens_a = a.split()
    tokens_b = b.split()
    if len(tokens_a) < 2 or len(tokens_b) < 2:
        return False
    if _fold(tokens_a[-1]) != _fold(tokens_b[-1]):
        return False

    lead_a, lead_b = tokens_a[0], tokens_b[0]
    if not (_is_initial(lead_a) or _is_initial(lead_b)):
        return False
    return _fold(lead_a[0]) == _fold(lead_b[0])


def score(a: str, b: str, algorithm: Algorithm) -> SimilarityScore:
    """Compute a tagged similarity score between two names.

    Args:
        a: First name string.
        b: Second name string.
        algorithm: Which scorer to apply.

    Returns:
        SimilarityScore in [0, 1]; ``initial-match`` yields 1.0 or 0.0.
    """
    algorithm = Algorithm(algorithm)
    if algorithm == Algorithm.JARO_WINKLER:
        value = jaro_winkler(a, b)
    elif algorithm == Algorithm.LCS_RATIO:
        value = lcs_ratio(a, b)
    elif algorithm == Algorithm.LEVENSHTEIN_RATIO:
        value = levenshtein_ratio(a, b)
    else:
        value = 1.0 if initial_compatible(a, b) else 0.0
    return SimilarityScore(value=value, algorithm=algorithm)


def phonetic_key(name: str) -> str:
    """Soundex code of a name, "" when it has no letters."""
    letters = "".join(c for c in strip_accents(name) if c.isalpha())
    if not letters:
        return ""
    return jellyfish.soundex(letters)
