"""Tests for domain models."""

import pytest
from pydantic import ValidationError

from authornorm.models import (
    CandidatePair,
    Creator,
    LibraryAnalysis,
    NormalizationResult,
    ParsedName,
    ResultStatus,
    Suggestion,
    SuggestionSource,
)


def _result(**kwargs: object) -> NormalizationResult:
    return NormalizationResult(
        original=Creator(first_name="J.", last_name="Smith"),
        raw="J. Smith",
        status=ResultStatus.NEW,
        parsed=ParsedName(first_name="J.", last_name="Smith"),
        **kwargs,
    )


class TestParsedName:
    """Tests for ParsedName."""

    def test_frozen(self) -> None:
        parsed = ParsedName(first_name="John", last_name="Smith")
        with pytest.raises(ValidationError):
            parsed.first_name = "Jane"

    def test_derived_fields(self) -> None:
        parsed = ParsedName(
            first_name="Sancho",
            last_name="de la Vega",
            particles=("de", "la"),
            suffix="Jr.",
        )
        assert parsed.base_surname == "Vega"
        assert parsed.full_name == "Sancho de la Vega Jr."
        assert parsed.given_names == ["Sancho"]
        assert not parsed.is_empty
        assert ParsedName().is_empty


class TestCreator:
    """Tests for host creator records."""

    def test_camel_case_aliases(self) -> None:
        creator = Creator.model_validate(
            {"firstName": "John", "lastName": "Smith", "creatorType": "editor"}
        )
        assert creator.first_name == "John"
        assert creator.creator_type == "editor"

    def test_snake_case_names(self) -> None:
        creator = Creator(first_name="John", last_name="Smith")
        assert creator.creator_type == "author"

    def test_null_fields_read_as_empty(self) -> None:
        """Host records with null fields validate with empty names."""
        creator = Creator.model_validate(
            {"firstName": None, "lastName": "Smith", "creatorType": None}
        )
        assert creator.first_name == ""
        assert creator.last_name == "Smith"
        assert creator.creator_type == "author"


class TestCandidatePair:
    """Tests for CandidatePair derived values."""

    def test_recommended_prefers_frequent(self) -> None:
        pair = CandidatePair(
            name1="Smyth", name2="Smith", frequency1=1, frequency2=4, similarity=0.9
        )
        assert pair.recommended == "Smith"
        assert pair.combined_frequency == 5

    def test_recommended_tie(self) -> None:
        pair = CandidatePair(
            name1="Smyth", name2="Smith", frequency1=2, frequency2=2, similarity=0.9
        )
        assert pair.recommended == "Smyth"

    def test_frequency_positive(self) -> None:
        with pytest.raises(ValidationError):
            CandidatePair(
                name1="a", name2="b", frequency1=0, frequency2=1, similarity=0.9
            )


class TestNormalizationResult:
    """Tests for accepting and rejecting results."""

    def test_accept_text(self) -> None:
        result = _result()
        result.accept("John Smith")
        assert result.accepted
        assert result.target == "John Smith"

    def test_accept_defaults_to_top_suggestion(self) -> None:
        result = _result(
            suggestions=[
                Suggestion(text="John Smith", source=SuggestionSource.VARIANT, score=0.9),
                Suggestion(text="J. Smith", source=SuggestionSource.ORIGINAL, score=1.0),
            ]
        )
        result.accept()
        assert result.target == "John Smith"

    def test_accept_prefers_learned_suggestion(self) -> None:
        result = _result(suggestion="Jane Smith")
        result.accept()
        assert result.target == "Jane Smith"

    def test_accept_without_target(self) -> None:
        with pytest.raises(ValueError):
            _result().accept()

    def test_reject(self) -> None:
        result = _result()
        result.accept("John Smith")
        result.reject()
        assert not result.accepted
        assert result.target is None


class TestLibraryAnalysis:
    """Tests for LibraryAnalysis.frequencies."""

    def test_sorted_by_count(self) -> None:
        analysis = LibraryAnalysis(
            surname_frequencies={"johnson": 1, "smith": 2, "adams": 1},
            surname_display={"smith": "Smith", "johnson": "Johnson"},
        )
        assert [(f.surname, f.count) for f in analysis.frequencies] == [
            ("Smith", 2),
            ("adams", 1),
            ("Johnson", 1),
        ]
