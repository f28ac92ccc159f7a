"""Configuration loading and validation for authornorm.

Reads a YAML config file and produces a validated NormalizerConfig object.
Every section is optional; an empty file yields the defaults.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "authornorm.yaml"


class ParserConfig(BaseModel):
    """Extra particle and suffix tokens for the name parser."""

    extra_particles: list[str] = Field(default_factory=list)
    extra_suffixes: list[str] = Field(default_factory=list)


class VariantConfig(BaseModel):
    """Variant generation settings."""

    max_variants: int = Field(default=20, ge=1)


class MatchingConfig(BaseModel):
    """Thresholds for library-wide candidate detection."""

    candidate_threshold: float = Field(default=0.80, ge=0.0, le=1.0)
    initial_match_threshold: float = Field(default=0.70, ge=0.0, le=1.0)
    given_name_threshold: float = Field(default=0.60, ge=0.0, le=1.0)
    phonetic_blocking: bool = False


class LearningConfig(BaseModel):
    """Learned-mapping store settings."""

    similarity_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    max_suggestions: int = Field(default=5, ge=1)
    save_delay: float = Field(default=1.0, ge=0.0)
    max_pending_writes: int = Field(default=25, ge=1)
    auto_accept_learned: bool = False


class NormalizerConfig(BaseModel):
    """Top-level authornorm configuration."""

    database_path: str = "~/.authornorm/mappings.db"
    parser: ParserConfig = Field(default_factory=ParserConfig)
    variants: VariantConfig = Field(default_factory=VariantConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    learning: LearningConfig = Field(default_factory=LearningConfig)

    @property
    def resolved_database_path(self) -> Path:
        """Return the database path with ~ expanded."""
        return Path(self.database_path).expanduser()


def load_config(config_path: str | Path) -> NormalizerConfig:
    """Load and validate an authornorm YAML configuration file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Validated NormalizerConfig instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the YAML is malformed.
        pydantic.ValidationError: If the config fails validation.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = NormalizerConfig.model_validate(raw)
    logger.info(
        "Loaded config from %s (database: %s)",
        path,
        config.resolved_database_path,
    )
    return config
