"""authornorm -- Author-name normalization for bibliographic libraries."""

from authornorm.backends import MemoryBackend, SqliteBackend
from authornorm.candidates import CandidateFinder
from authornorm.config import NormalizerConfig, load_config
from authornorm.core import NameNormalizationEngine
from authornorm.learning import LearningEngine
from authornorm.models import (
    CandidatePair,
    Creator,
    LearnedMapping,
    LibraryAnalysis,
    NormalizationResult,
    ParsedName,
    Suggestion,
    Variant,
    VariantKind,
)
from authornorm.parser import NameParser
from authornorm.variants import VariantGenerator

__all__ = [
    "CandidateFinder",
    "CandidatePair",
    "Creator",
    "LearnedMapping",
    "LearningEngine",
    "LibraryAnalysis",
    "MemoryBackend",
    "NameNormalizationEngine",
    "NameParser",
    "NormalizationResult",
    "NormalizerConfig",
    "ParsedName",
    "SqliteBackend",
    "Suggestion",
    "Variant",
    "VariantGenerator",
    "VariantKind",
    "load_config",
]
