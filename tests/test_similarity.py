"""Tests for string-similarity scorers."""

import pytest

from authornorm.models import Algorithm
from authornorm.similarity import (
    initial_compatible,
    jaro_winkler,
    lcs_ratio,
    levenshtein_distance,
    levenshtein_ratio,
    phonetic_key,
    score,
)

NAMES = ["Smith", "Smyth", "", "de la Vega", "Jerry A. Fodor", "Dvořák"]


class TestLevenshtein:
    """Tests for edit distance and its ratio."""

    @pytest.mark.parametrize("name", NAMES)
    def test_identity(self, name: str) -> None:
        """A string is at distance zero from itself."""
        assert levenshtein_distance(name, name) == 0

    @pytest.mark.parametrize("a", NAMES)
    @pytest.mark.parametrize("b", NAMES)
    def test_symmetry(self, a: str, b: str) -> None:
        """Distance does not depend on argument order."""
        assert levenshtein_distance(a, b) == levenshtein_distance(b, a)

    def test_triangle_inequality(self) -> None:
        """d(a, c) <= d(a, b) + d(b, c)."""
        a, b, c = "Smith", "Smyth", "Smythe"
        assert levenshtein_distance(a, c) <= (
            levenshtein_distance(a, b) + levenshtein_distance(b, c)
        )

    def test_known_distances(self) -> None:
        """One substitution; deletion of every character."""
        assert levenshtein_distance("Smith", "Smyth") == 1
        assert levenshtein_distance("Smith", "") == 5

    def test_case_insensitive(self) -> None:
        """Case differences are not edits."""
        assert levenshtein_distance("SMITH", "smith") == 0

    def test_ratio(self) -> None:
        """Ratio is 1 - distance / longer length."""
        assert levenshtein_ratio("Smith", "Smyth") == pytest.approx(0.8)

    def test_ratio_of_empty_strings(self) -> None:
        """Two empty strings are identical."""
        assert levenshtein_ratio("", "") == 1.0


class TestJaroWinkler:
    """Tests for Jaro-Winkler similarity."""

    def test_identical(self) -> None:
        """Identical strings score 1.0."""
        assert jaro_winkler("Smith", "smith") == 1.0

    def test_textbook_value(self) -> None:
        """MARTHA / MARHTA is the classic 0.961 example."""
        assert jaro_winkler("MARTHA", "MARHTA") == pytest.approx(0.961, abs=1e-3)

    def test_empty_inputs(self) -> None:
        """Empty vs empty is 1.0, empty vs non-empty is 0.0."""
        assert jaro_winkler("", "") == 1.0
        assert jaro_winkler("Smith", "") == 0.0

    def test_spelling_variant_clears_threshold(self) -> None:
        """Smith / Smyth scores above the 0.80 candidate threshold."""
        assert 0.8 <= jaro_winkler("Smith", "Smyth") < 1.0


class TestLcsRatio:
    """Tests for the longest-common-subsequence ratio."""

    def test_ratio(self) -> None:
        """"Smth" is common to Smith and Smyth."""
        assert lcs_ratio("Smith", "Smyth") == pytest.approx(0.8)

    def test_empty_strings(self) -> None:
        """Two empty strings are identical."""
        assert lcs_ratio("", "") == 1.0

    def test_casefold_expansion(self) -> None:
        """Lengths are taken after folding, where "ß" becomes "ss"."""
        assert lcs_ratio("Strauß", "Strauß") == 1.0
        assert lcs_ratio("Strauß", "STRAUSS") == 1.0
        result = score("Strauß", "Strauss", Algorithm.LCS_RATIO)
        assert result.value == 1.0


class TestInitialCompatible:
    """Tests for the initial-compatibility predicate."""

    def test_initial_matches_full_name(self) -> None:
        """J. Smith may be John Smith."""
        assert initial_compatible("J. Smith", "John Smith")
        assert initial_compatible("J Smith", "john smith")

    def test_different_letter(self) -> None:
        """J. Smith is not Karl Smith."""
        assert not initial_compatible("J. Smith", "Karl Smith")

    def test_different_surname(self) -> None:
        """Surnames must match."""
        assert not initial_compatible("J. Smith", "John Smyth")

    def test_single_token(self) -> None:
        """Both names need a given name and a surname."""
        assert not initial_compatible("Smith", "John Smith")

    def test_no_initial(self) -> None:
        """Two full given names are not initial-compatible."""
        assert not initial_compatible("John Smith", "Jane Smith")


class TestScore:
    """Tests for algorithm dispatch."""

    def test_tags_algorithm(self) -> None:
        """The result carries the requested algorithm."""
        result = score("Smith", "Smyth", Algorithm.LEVENSHTEIN_RATIO)
        assert result.algorithm == Algorithm.LEVENSHTEIN_RATIO
        assert result.value == pytest.approx(0.8)

    def test_accepts_plain_tag(self) -> None:
        """String tags are accepted."""
        result = score("Smith", "Smith", "jaro-winkler")
        assert result.algorithm == Algorithm.JARO_WINKLER
        assert result.value == 1.0

    def test_initial_match_is_binary(self) -> None:
        """initial-match yields 1.0 or 0.0."""
        assert score("J. Smith", "John Smith", Algorithm.INITIAL_MATCH).value == 1.0
        assert score("J. Smith", "Karl Smith", Algorithm.INITIAL_MATCH).value == 0.0

    @pytest.mark.parametrize("algorithm", list(Algorithm))
    def test_values_in_range(self, algorithm: Algorithm) -> None:
        """Every algorithm scores within [0, 1]."""
        value = score("Jerry A. Fodor", "Fodor, J.", algorithm).value
        assert 0.0 <= value <= 1.0


class TestPhoneticKey:
    """Tests for Soundex keys."""

    def test_spelling_variants_share_code(self) -> None:
        """Smith and Smyth share a Soundex code."""
        assert phonetic_key("Smith") == phonetic_key("Smyth") == "S530"

    def test_accents_folded(self) -> None:
        """Diacritics are removed before encoding."""
        assert phonetic_key("Dvořák") == phonetic_key("Dvorak")

    def test_no_letters(self) -> None:
        """Names without letters have no code."""
        assert phonetic_key("") == ""
        assert phonetic_key("123") == ""
