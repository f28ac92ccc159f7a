"""Tests for library-wide candidate detection."""

from authornorm.candidates import CandidateFinder, find_canonical_forms
from authornorm.models import Creator
from authornorm.similarity import initial_compatible


class TestFindPotentialVariants:
    """Tests for surname pair detection."""

    def test_reference_surnames(self) -> None:
        """Spelling variants are paired, with positive frequencies."""
        pairs = CandidateFinder().find_potential_variants(
            ["Smith", "Smyth", "Smythe", "Johnson", "Johnsen"]
        )
        assert pairs
        for pair in pairs:
            assert pair.similarity >= 0.80 or initial_compatible(
                pair.name1, pair.name2
            )
            assert pair.frequency1 >= 1
            assert pair.frequency2 >= 1
        found = {frozenset((p.name1, p.name2)) for p in pairs}
        assert frozenset(("Smith", "Smyth")) in found
        assert frozenset(("Johnson", "Johnsen")) in found

    def test_sorted_by_similarity(self) -> None:
        """Pairs come most similar first."""
        pairs = CandidateFinder().find_potential_variants(
            ["Smith", "Smyth", "Smythe", "Johnson", "Johnsen"]
        )
        similarities = [p.similarity for p in pairs]
        assert similarities == sorted(similarities, reverse=True)

    def test_no_matches(self) -> None:
        """Dissimilar surnames yield an empty list."""
        assert CandidateFinder().find_potential_variants(["Smith", "Chomsky"]) == []

    def test_case_insensitive_counts(self) -> None:
        """Case variants are one surname, counted together."""
        pairs = CandidateFinder().find_potential_variants(
            ["Smith", "smith", "Smyth"]
        )
        assert len(pairs) == 1
        assert pairs[0].name1 == "Smith"
        assert pairs[0].frequency1 == 2
        assert pairs[0].frequency2 == 1
        assert pairs[0].recommended == "Smith"

    def test_explicit_frequencies(self) -> None:
        """Explicit counts are looked up by name, then lowercase name."""
        pairs = CandidateFinder().find_potential_variants(
            ["Smith", "Smyth"], frequencies={"Smith": 1, "smyth": 7}
        )
        assert pairs[0].frequency1 == 1
        assert pairs[0].frequency2 == 7
        assert pairs[0].recommended == "Smyth"

    def test_initial_compatible_exception(self) -> None:
        """Initial-compatible names clear the lower threshold."""
        finder = CandidateFinder(threshold=0.99, initial_threshold=0.5)
        pairs = finder.find_potential_variants(["J. Smith", "John Smith"])
        assert len(pairs) == 1
        assert not finder.find_potential_variants(["J. Smith", "Karl Smith"])

    def test_phonetic_blocking(self) -> None:
        """Blocking only compares surnames with the same Soundex code."""
        names = ["Catherine", "Katherine", "Johnson", "Johnsen"]
        unblocked = CandidateFinder().find_potential_variants(names)
        blocked = CandidateFinder(phonetic_blocking=True).find_potential_variants(
            names
        )
        assert len(unblocked) == 2
        assert [(p.name1, p.name2) for p in blocked] == [("Johnson", "Johnsen")]


class TestGivenNameVariants:
    """Tests for given-name variant detection and canonical forms."""

    def test_initial_and_full_name(self) -> None:
        """"J." and "Jerry" under one surname are paired."""
        creators = [
            Creator(first_name="J.", last_name="Fodor"),
            Creator(first_name="Jerry", last_name="Fodor"),
            Creator(first_name="Jerry", last_name="Fodor"),
            Creator(first_name="Noam", last_name="Chomsky"),
        ]
        variants = CandidateFinder().find_given_name_variants(creators)
        assert len(variants) == 1
        variant = variants[0]
        assert variant.surname == "Fodor"
        assert variant.recommended == "Jerry"
        assert variant.combined_frequency == 3

    def test_different_surnames_not_paired(self) -> None:
        """Given names are only compared under a shared surname."""
        creators = [
            Creator(first_name="John", last_name="Smith"),
            Creator(first_name="Jon", last_name="Jones"),
        ]
        assert CandidateFinder().find_given_name_variants(creators) == []

    def test_unrelated_given_names(self) -> None:
        """Dissimilar full given names are not paired."""
        creators = [
            Creator(first_name="Mary", last_name="Smith"),
            Creator(first_name="Robert", last_name="Smith"),
        ]
        assert CandidateFinder().find_given_name_variants(creators) == []

    def test_canonical_forms(self) -> None:
        """Every rendering maps to the more frequent given name."""
        creators = [
            Creator(first_name="J.", last_name="Fodor"),
            Creator(first_name="Jerry", last_name="Fodor"),
            Creator(first_name="Jerry", last_name="Fodor"),
        ]
        variants = CandidateFinder().find_given_name_variants(creators)
        assert find_canonical_forms(variants) == {
            "j. fodor": "Jerry Fodor",
            "jerry fodor": "Jerry Fodor",
        }
