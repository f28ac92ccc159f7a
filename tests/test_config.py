"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from authornorm.config import NormalizerConfig, load_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_config(self, tmp_config: Path, tmp_path: Path) -> None:
        """Config loads and validates from YAML."""
        config = load_config(tmp_config)
        assert config.resolved_database_path == tmp_path / "mappings.db"
        assert config.parser.extra_particles == ["bin"]
        assert config.matching.candidate_threshold == 0.82
        assert config.learning.max_suggestions == 4
        assert config.learning.save_delay == 0.5

    def test_defaults_for_missing_sections(self, tmp_config: Path) -> None:
        """Sections absent from the file keep their defaults."""
        config = load_config(tmp_config)
        assert config.variants.max_variants == 20
        assert config.matching.initial_match_threshold == 0.70
        assert config.learning.similarity_threshold == 0.85
        assert config.learning.auto_accept_learned is False

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields the default configuration."""
        config_path = tmp_path / "authornorm.yaml"
        config_path.write_text("")
        assert load_config(config_path) == NormalizerConfig()

    def test_missing_config(self, tmp_path: Path) -> None:
        """FileNotFoundError raised for missing config."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_invalid_threshold(self, tmp_path: Path) -> None:
        """Out-of-range thresholds fail validation."""
        config_path = tmp_path / "authornorm.yaml"
        config_path.write_text("matching:\n  candidate_threshold: 2.0\n")
        with pytest.raises(ValidationError):
            load_config(config_path)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        config_path = tmp_path / "authornorm.yaml"
        config_path.write_text("learning: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(config_path)

    def test_home_expanded(self) -> None:
        """~ in the database path is expanded."""
        config = NormalizerConfig(database_path="~/mappings.db")
        assert config.resolved_database_path == Path.home() / "mappings.db"
