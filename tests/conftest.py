"""Shared pytest fixtures for authornorm tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from authornorm.backends import MemoryBackend, SqliteBackend
from authornorm.core import NameNormalizationEngine
from authornorm.learning import LearningEngine
from authornorm.models import Creator, LibraryItem


@pytest.fixture
def memory_backend() -> MemoryBackend:
    """Create an empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def sqlite_backend(tmp_path: Path) -> Iterator[SqliteBackend]:
    """Create a SqliteBackend backed by a temp database."""
    backend = SqliteBackend(tmp_path / "mappings.db")
    yield backend
    backend.close()


@pytest.fixture
def learning(memory_backend: MemoryBackend) -> LearningEngine:
    """Create a LearningEngine over the in-memory backend."""
    return LearningEngine(memory_backend)


@pytest.fixture
def engine(learning: LearningEngine) -> NameNormalizationEngine:
    """Create a NameNormalizationEngine with default settings."""
    return NameNormalizationEngine(learning)


@pytest.fixture
def sample_creators() -> list[Creator]:
    """Creators with an abbreviated and an expanded rendering of one author."""
    return [
        Creator(first_name="Jerry A.", last_name="Fodor"),
        Creator(first_name="J.", last_name="Fodor"),
        Creator(first_name="Jerry", last_name="Fodor"),
        Creator(first_name="Noam", last_name="Chomsky"),
    ]


@pytest.fixture
def sample_items() -> list[LibraryItem]:
    """Two items whose creators yield surnames [Smith, Johnson, Smith]."""
    return [
        LibraryItem(
            key="ITEM1",
            title="On Names",
            creators=[
                Creator(first_name="John", last_name="Smith"),
                Creator(first_name="Mary", last_name="Johnson"),
            ],
        ),
        LibraryItem(
            key="ITEM2",
            title="More on Names",
            creators=[Creator(first_name="Jane", last_name="Smith")],
        ),
    ]


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Create a temporary authornorm.yaml config file."""
    config_content = f"""
database_path: "{tmp_path / 'mappings.db'}"

parser:
  extra_particles:
    - bin

matching:
  candidate_threshold: 0.82

learning:
  max_suggestions: 4
  save_delay: 0.5
"""
    config_path = tmp_path / "authornorm.yaml"
    config_path.write_text(config_content)
    return config_path
