"""Core orchestration engine for authornorm.

Ties together parsing, variant generation, learned mappings, and
library-wide candidate detection. This is the single entry point used by
all consumer interfaces (CLI, host integrations, library use).
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from authornorm.backends.sqlite import SqliteBackend
from authornorm.candidates import CandidateFinder, find_canonical_forms
from authornorm.config import NormalizerConfig, load_config
from authornorm.interfaces import (
    CreatorLike,
    CreatorUpdater,
    ItemLike,
    NameStructurer,
)
from authornorm.learning import LearningEngine
from authornorm.models import (
    Creator,
    LearnedMapping,
    LibraryAnalysis,
    NormalizationResult,
    ParsedName,
    ResultStatus,
    SimilarMapping,
    Suggestion,
    SuggestionSource,
    Variant,
)
from authornorm.normalize import build_full_name, collapse_whitespace, surname_key
from authornorm.parser import NameParser
from authornorm.similarity import jaro_winkler
from authornorm.variants import VariantGenerator

logger = logging.getLogger(__name__)

CreatorInput = Creator | CreatorLike | Mapping[str, Any]
ItemInput = ItemLike | Mapping[str, Any]


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class NameNormalizationEngine:
    """Main orchestrator for author-name normalization.

    Owns one instance each of the parser, variant generator, candidate
    finder and learning engine; all are injected or built from config.
    """

    def __init__(
        self,
        learning: LearningEngine,
        *,
        parser: NameParser | None = None,
        variant_generator: VariantGenerator | None = None,
        candidate_finder: CandidateFinder | None = None,
        structurer: NameStructurer | None = None,
        config: NormalizerConfig | None = None,
    ) -> None:
        """Wire the engine's collaborators.

        Args:
            learning: Learned-mapping store.
            parser: Rule-based parser; built from config if omitted.
            variant_generator: Variant generator; built if omitted.
            candidate_finder: Candidate finder; built if omitted.
            structurer: Optional name structurer consulted before the
                rule-based parser.
            config: Settings; defaults apply when omitted.
        """
        self.config = config or NormalizerConfig()
        self.learning = learning
        self.parser = parser or NameParser(
            extra_particles=self.config.parser.extra_particles,
            extra_suffixes=self.config.parser.extra_suffixes,
        )
        self.variant_generator = variant_generator or VariantGenerator(
            parser=self.parser,
            max_variants=self.config.variants.max_variants,
        )
        matching = self.config.matching
        self.candidate_finder = candidate_finder or CandidateFinder(
            threshold=matching.candidate_threshold,
            initial_threshold=matching.initial_match_threshold,
            given_name_threshold=matching.given_name_threshold,
            phonetic_blocking=matching.phonetic_blocking,
        )
        self.structurer = structurer
        self._owned_backend: SqliteBackend | None = None

    @classmethod
    def from_config(
        cls, config_path: str | Path | None = None
    ) -> "NameNormalizationEngine":
        """Build an engine backed by the configured SQLite database.

        Args:
            config_path: Path to an authornorm YAML file. Defaults are
                used when None.

        Returns:
            Engine owning its SQLite backend (closed by :meth:`close`).
        """
        config = (
            load_config(config_path)
            if config_path is not None
            else NormalizerConfig()
        )
        backend = SqliteBackend(config.resolved_database_path)
        learning = LearningEngine(
            backend,
            save_delay=config.learning.save_delay,
            max_pending_writes=config.learning.max_pending_writes,
            similarity_threshold=config.learning.similarity_threshold,
            max_suggestions=config.learning.max_suggestions,
        )
        engine = cls(learning, config=config)
        engine._owned_backend = backend
        return engine

    def close(self) -> None:
        """Flush learned mappings and release an owned backend."""
        self.learning.close()
        if self._owned_backend is not None:
            self._owned_backend.close()
            self._owned_backend = None

    def __enter__(self) -> "NameNormalizationEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Parsing -------------------------------------------------------

    def _structure(self, raw: str) -> ParsedName | None:
        if self.structurer is None:
            return None
        try:
            structured = self.structurer.analyze(raw)
        except Exception:
            logger.warning(
                "Name structurer failed on %r; using rule-based parser",
                raw,
                exc_info=True,
            )
            return None
        if isinstance(structured, ParsedName):
            return structured
        if isinstance(structured, Mapping):
            try:
                return ParsedName.model_validate(
                    {"original": raw, **structured}
                )
            except ValidationError:
                logger.warning(
                    "Name structurer returned invalid fields for %r", raw
                )
        return None

    def parse_name(self, raw: str) -> ParsedName:
        """Parse a raw name, consulting the structurer first if present."""
        return self._structure(raw) or self.parser.parse(raw)

    def _parse_creator(self, creator: Creator) -> ParsedName:
        structured = self._structure(self.build_raw_name(creator))
        if structured is not None:
            return structured
        return self.parser.parse_creator(
            creator.first_name, creator.last_name
        )

    @staticmethod
    def build_raw_name(creator: CreatorLike) -> str:
        """Return "first last" for a creator record, trimmed."""
        return build_full_name(creator.first_name, creator.last_name)

    @staticmethod
    def _coerce_creator(creator: CreatorInput) -> Creator:
        if isinstance(creator, Creator):
            return creator
        if isinstance(creator, Mapping):
            return Creator.model_validate(creator)
        return Creator(
            first_name=creator.first_name or "",
            last_name=creator.last_name or "",
            creator_type=getattr(creator, "creator_type", None) or "author",
        )

    def _creator_from_name(self, text: str, creator_type: str) -> Creator:
        parsed = self.parser.parse(text)
        last = " ".join(p for p in (parsed.last_name, parsed.suffix) if p)
        return Creator(
            first_name=parsed.first_name,
            last_name=last,
            creator_type=creator_type,
        )

    # -- Suggestions ---------------------------------------------------

    def _rank_suggestions(
        self,
        raw: str,
        exact: LearnedMapping | None,
        similars: list[SimilarMapping],
        variants: list[Variant],
    ) -> list[Suggestion]:
        original = collapse_whitespace(raw)
        seen = {original.casefold()}
        ranked: list[Suggestion] = []

        def add(suggestion: Suggestion) -> None:
            folded = suggestion.text.casefold()
            if suggestion.text and folded not in seen:
                seen.add(folded)
                ranked.append(suggestion)

        if exact is not None:
            add(
                Suggestion(
                    text=exact.normalized,
                    source=SuggestionSource.LEARNED,
                    score=exact.confidence,
                )
            )
        for similar in similars:
            add(
                Suggestion(
                    text=similar.normalized,
                    source=SuggestionSource.LEARNED,
                    score=similar.similarity,
                )
            )
        scored = sorted(
            ((jaro_winkler(v.text, original), v) for v in variants),
            key=lambda s: -s[0],
        )
        for value, variant in scored:
            add(
                Suggestion(
                    text=variant.text,
                    source=SuggestionSource.VARIANT,
                    score=_clamp(value),
                    kind=variant.kind,
                )
            )

        limit = self.config.learning.max_suggestions
        ranked = ranked[: max(limit - 1, 0)]
        if original:
            ranked.append(
                Suggestion(
                    text=original,
                    source=SuggestionSource.ORIGINAL,
                    score=1.0,
                )
            )
        return ranked

    def suggest(self, raw: str) -> list[Suggestion]:
        """Rank normalization candidates for one raw name.

        Learned mappings come first, then variants by similarity to the
        input; the unchanged input is always the last entry.

        Args:
            raw: Raw author name.

        Returns:
            At most ``learning.max_suggestions`` suggestions.
        """
        if not collapse_whitespace(raw):
            return []
        exact = self.learning.get_mapping_details(raw)
        if exact is not None:
            self.learning.record_usage(raw)
        return self._rank_suggestions(
            raw,
            exact,
            self.learning.find_similar(raw),
            self.variant_generator.generate_variants(self.parse_name(raw)),
        )

    # -- Batch normalization -------------------------------------------

    def process_creators(
        self, creators: Iterable[CreatorInput]
    ) -> list[NormalizationResult]:
        """Propose a normalization for each creator.

        Creators whose first and last names are both empty are skipped;
        every other creator yields exactly one result.

        Args:
            creators: Creator records, protocol objects or mappings.

        Returns:
            One NormalizationResult per non-empty creator, in order.
        """
        auto_accept = self.config.learning.auto_accept_learned
        results: list[NormalizationResult] = []
        for entry in creators:
            creator = self._coerce_creator(entry)
            raw = self.build_raw_name(creator)
            if not raw:
                logger.debug("Skipping creator with empty name")
                continue

            parsed = self._parse_creator(creator)
            learned = self.learning.get_mapping_details(raw)
            if learned is not None:
                self.learning.record_usage(raw)
                result = NormalizationResult(
                    original=creator,
                    raw=raw,
                    status=ResultStatus.LEARNED,
                    parsed=parsed,
                    suggestion=learned.normalized,
                    normalized=self._creator_from_name(
                        learned.normalized, creator.creator_type
                    ),
                    suggestions=self._rank_suggestions(raw, learned, [], []),
                )
                if auto_accept:
                    result.accepted = True
                    result.target = learned.normalized
            else:
                similars = self.learning.find_similar(raw)
                variants = self.variant_generator.generate_variants(parsed)
                result = NormalizationResult(
                    original=creator,
                    raw=raw,
                    status=ResultStatus.NEW,
                    parsed=parsed,
                    variants=variants,
                    similars=similars,
                    suggestions=self._rank_suggestions(
                        raw, None, similars, variants
                    ),
                )
            results.append(result)

        learned_count = sum(
            1 for r in results if r.status == ResultStatus.LEARNED
        )
        logger.info(
            "Processed %d creators (%d learned, %d new)",
            len(results),
            learned_count,
            len(results) - learned_count,
        )
        return results

    def apply_normalizations(
        self,
        results: Iterable[NormalizationResult],
        only_accepted: bool = True,
        updater: CreatorUpdater | None = None,
    ) -> int:
        """Learn (and optionally write back) normalization decisions.

        Stores one mapping per applied result, from the original raw
        name to the raw form of the normalized creator.

        Args:
            results: Results from :meth:`process_creators`.
            only_accepted: Apply only results marked accepted; otherwise
                every result with a target or learned suggestion.
            updater: Host collaborator that rewrites the creator.

        Returns:
            Number of results applied.
        """
        applied = 0
        for result in results:
            if only_accepted and not result.accepted:
                continue

            normalized = result.normalized
            if normalized is None:
                target = result.target or result.suggestion
                if not target:
                    if result.accepted:
                        logger.warning(
                            "No normalization target for %r; skipping",
                            result.raw,
                        )
                    continue
                normalized = self._creator_from_name(
                    target, result.original.creator_type
                )

            self.learning.store_mapping(
                result.raw, self.build_raw_name(normalized)
            )
            if updater is not None:
                updater.update_creator(result.original, normalized)
            result.normalized = normalized
            applied += 1

        logger.info("Applied %d normalizations", applied)
        return applied

    # -- Library analysis ----------------------------------------------

    def perform_library_analysis(
        self, items: Iterable[ItemInput]
    ) -> LibraryAnalysis:
        """Analyze surname usage across a library snapshot.

        Args:
            items: Items carrying creators (objects or mappings).

        Returns:
            Surname frequencies, likely surname variants (minus pairs
            recorded as distinct), given-name variants and canonical
            forms.
        """
        counts: Counter[str] = Counter()
        display: dict[str, str] = {}
        records: list[Creator] = []

        for item in items:
            if isinstance(item, Mapping):
                entries = item.get("creators") or []
            else:
                entries = getattr(item, "creators", None) or []
            for entry in entries:
                creator = self._coerce_creator(entry)
                parsed = self.parser.parse_creator(
                    creator.first_name, creator.last_name
                )
                surname = parsed.last_name
                if not surname:
                    continue
                key = surname_key(surname)
                display.setdefault(key, surname)
                counts[key] += 1
                records.append(
                    Creator(
                        first_name=parsed.first_name,
                        last_name=surname,
                        creator_type=creator.creator_type,
                    )
                )

        pairs = self.candidate_finder.find_potential_variants(
            [display[key] for key in counts],
            frequencies={display[key]: count for key, count in counts.items()},
        )
        pairs = [
            p
            for p in pairs
            if not self.learning.is_distinct_pair(p.name1, p.name2)
        ]
        given_variants = self.candidate_finder.find_given_name_variants(records)

        analysis = LibraryAnalysis(
            surname_frequencies=dict(counts),
            surname_display=display,
            total_names=sum(counts.values()),
            unique_surnames=len(counts),
            potential_variants=pairs,
            given_name_variants=given_variants,
            canonical_forms=find_canonical_forms(given_variants),
        )
        logger.info(
            "Analyzed %d names (%d unique surnames): %d surname variants, "
            "%d given-name variants",
            analysis.total_names,
            analysis.unique_surnames,
            len(pairs),
            len(given_variants),
        )
        return analysis
