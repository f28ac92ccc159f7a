"""Pydantic data models for authornorm.

Defines the core domain types: ParsedName, Variant, LearnedMapping,
CandidatePair, NormalizationResult, and related enums.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VariantKind(StrEnum):
    """Strategy that produced a name variant."""

    INITIALS = "initials"
    EXPANDED = "expanded"
    PARTICLE_VARIANT = "particle-variant"
    REORDERED = "reordered"


class Algorithm(StrEnum):
    """String-similarity algorithm identifier."""

    JARO_WINKLER = "jaro-winkler"
    LCS_RATIO = "lcs-ratio"
    LEVENSHTEIN_RATIO = "levenshtein-ratio"
    INITIAL_MATCH = "initial-match"


class ResultStatus(StrEnum):
    """Outcome of normalizing a single creator."""

    LEARNED = "learned"
    NEW = "new"


class SuggestionSource(StrEnum):
    """Provenance of a ranked suggestion."""

    LEARNED = "learned"
    VARIANT = "variant"
    ORIGINAL = "original"


class ParsedName(BaseModel):
    """Structured components of a personal name.

    ``last_name`` carries any surname particles ("de la Vega"), so
    ``first_name`` followed by ``last_name`` is always displayable.
    """

    model_config = ConfigDict(frozen=True)

    first_name: str = ""
    last_name: str = ""
    particles: tuple[str, ...] = ()
    suffix: str | None = None
    initials: tuple[str, ...] = ()
    original: str = ""

    @property
    def given_names(self) -> list[str]:
        """Whitespace-delimited tokens of ``first_name``."""
        return self.first_name.split()

    @property
    def base_surname(self) -> str:
        """Surname with its leading particles detached."""
        tokens = self.last_name.split()
        return " ".join(tokens[len(self.particles):]) or self.last_name

    @property
    def full_name(self) -> str:
        """Display form: given names, surname, then suffix."""
        parts = [self.first_name, self.last_name]
        if self.suffix:
            parts.append(self.suffix)
        return " ".join(p for p in parts if p)

    @property
    def is_empty(self) -> bool:
        """True when no name component was recognized."""
        return not (self.first_name or self.last_name or self.suffix)


class Variant(BaseModel):
    """An alternate rendering of a name."""

    text: str
    kind: VariantKind


class SimilarityScore(BaseModel):
    """A similarity value tagged with the algorithm that produced it."""

    value: float = Field(ge=0.0, le=1.0)
    algorithm: Algorithm


class LearnedMapping(BaseModel):
    """A user-approved raw-name to normalized-name correspondence."""

    key: str
    raw: str
    normalized: str
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    timestamp: datetime
    last_used: datetime | None = None
    usage_count: int = Field(default=1, ge=1)


class SimilarMapping(BaseModel):
    """A stored mapping whose key resembles a queried name."""

    raw: str
    normalized: str
    similarity: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class MappingStatistics(BaseModel):
    """Aggregate figures over the learned mappings."""

    total_mappings: int = 0
    total_usage: int = 0
    average_usage: float = 0.0
    average_confidence: float = 0.0


class SurnameFrequency(BaseModel):
    """Occurrence count of one surname within a library snapshot."""

    surname: str
    count: int = Field(ge=1)


class CandidatePair(BaseModel):
    """Two distinct surnames judged likely to denote the same person."""

    name1: str
    name2: str
    frequency1: int = Field(ge=1)
    frequency2: int = Field(ge=1)
    similarity: float = Field(ge=0.0, le=1.0)

    @property
    def combined_frequency(self) -> int:
        return self.frequency1 + self.frequency2

    @property
    def recommended(self) -> str:
        """The more frequent of the two names (``name1`` on ties)."""
        return self.name1 if self.frequency1 >= self.frequency2 else self.name2


class GivenNameVariant(BaseModel):
    """Two given-name renderings under one surname, e.g. "J." and "Jerry"."""

    surname: str
    given_name1: str
    frequency1: int = Field(ge=1)
    given_name2: str
    frequency2: int = Field(ge=1)
    similarity: float = Field(ge=0.0, le=1.0)

    @property
    def combined_frequency(self) -> int:
        return self.frequency1 + self.frequency2

    @property
    def recommended(self) -> str:
        if self.frequency1 >= self.frequency2:
            return self.given_name1
        return self.given_name2


class Creator(BaseModel):
    """A creator record as exchanged with the host library.

    Accepts the host's camelCase field names as aliases.
    """

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    creator_type: str = Field(default="author", alias="creatorType")

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("creator_type", mode="before")
    @classmethod
    def _default_creator_type(cls, value: object) -> object:
        return value or "author"


class LibraryItem(BaseModel):
    """A library item carrying an ordered creator list."""

    key: str | None = None
    title: str | None = None
    creators: list[Creator] = Field(default_factory=list)


class Suggestion(BaseModel):
    """A ranked normalization candidate with its provenance."""

    text: str
    source: SuggestionSource
    score: float = Field(ge=0.0, le=1.0)
    kind: VariantKind | None = None


class NormalizationResult(BaseModel):
    """Normalization proposal for a single creator."""

    original: Creator
    raw: str
    status: ResultStatus
    parsed: ParsedName
    suggestion: str | None = None
    variants: list[Variant] = Field(default_factory=list)
    similars: list[SimilarMapping] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)
    accepted: bool = False
    target: str | None = None
    normalized: Creator | None = None

    def accept(self, text: str | None = None) -> None:
        """Mark this result accepted, targeting ``text``.

        Args:
            text: Normalized full name. Defaults to the stored learned
                suggestion, then to the top-ranked suggestion.

        Raises:
            ValueError: If no target text is available.
        """
        target = text or self.suggestion
        if target is None and self.suggestions:
            target = self.suggestions[0].text
        if not target:
            raise ValueError(f"No normalization target for '{self.raw}'")
        self.target = target
        self.normalized = None
        self.accepted = True

    def reject(self) -> None:
        """Clear any acceptance on this result."""
        self.accepted = False
        self.target = None


class LibraryAnalysis(BaseModel):
    """Result of a library-wide surname analysis."""

    surname_frequencies: dict[str, int] = Field(default_factory=dict)
    surname_display: dict[str, str] = Field(default_factory=dict)
    total_names: int = 0
    unique_surnames: int = 0
    potential_variants: list[CandidatePair] = Field(default_factory=list)
    given_name_variants: list[GivenNameVariant] = Field(default_factory=list)
    canonical_forms: dict[str, str] = Field(default_factory=dict)

    @property
    def frequencies(self) -> list[SurnameFrequency]:
        """Surname counts, most frequent first."""
        return [
            SurnameFrequency(
                surname=self.surname_display.get(key, key), count=count
            )
            for key, count in sorted(
                self.surname_frequencies.items(),
                key=lambda kv: (-kv[1], kv[0]),
            )
        ]
