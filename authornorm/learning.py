"""Persistent store of user-approved name mappings.

The engine loads every mapping from an injected backend once, serves all
reads from its in-memory cache, and writes changes back in coalesced
batches. A flush is scheduled on the running asyncio loop when there is
one; otherwise dirty entries are written when the batch fills up, on
:meth:`LearningEngine.force_save`, or on :meth:`LearningEngine.close`.

Backend failures are logged and never propagated: learning is
best-effort and must not block normalization.
"""

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import orjson
from pydantic import ValidationError

from authornorm.backends.base import DeletableBackend, MappingBackend
from authornorm.models import LearnedMapping, MappingStatistics, SimilarMapping
from authornorm.normalize import canonical_key, collapse_whitespace
from authornorm.similarity import jaro_winkler

logger = logging.getLogger(__name__)

MAPPING_PREFIX = "mapping:"
DISTINCT_PREFIX = "distinct:"
EXPORT_VERSION = "1.0"

DEFAULT_SIMILARITY_THRESHOLD = 0.85
DEFAULT_SAVE_DELAY = 1.0
DEFAULT_MAX_PENDING_WRITES = 25


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _encode_mapping(mapping: LearnedMapping) -> str:
    payload = mapping.model_dump(mode="json", exclude={"key"})
    return orjson.dumps(payload).decode()


def _decode_mapping(key: str, value: str) -> LearnedMapping:
    payload = orjson.loads(value)
    return LearnedMapping.model_validate({**payload, "key": key})


class LearningEngine:
    """Learned raw-name to normalized-name mappings with fuzzy lookup."""

    def __init__(
        self,
        backend: MappingBackend | None,
        *,
        save_delay: float = DEFAULT_SAVE_DELAY,
        max_pending_writes: int = DEFAULT_MAX_PENDING_WRITES,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        max_suggestions: int | None = None,
    ) -> None:
        """Initialize the engine and load stored mappings.

        Args:
            backend: Persistence backend (get/set/keys).
            save_delay: Seconds to wait before a scheduled flush.
            max_pending_writes: Dirty-entry count that forces a flush.
            similarity_threshold: Default threshold for find_similar.
            max_suggestions: Cap on find_similar results (None = all).

        Raises:
            ValueError: If no backend is supplied.
        """
        if backend is None:
            raise ValueError(
                "LearningEngine requires a persistence backend"
            )
        self.backend = backend
        self.save_delay = save_delay
        self.max_pending_writes = max_pending_writes
        self.similarity_threshold = similarity_threshold
        self.max_suggestions = max_suggestions

        self._mappings: dict[str, LearnedMapping] = {}
        self._distinct_pairs: dict[str, dict[str, str]] = {}
        self._dirty: set[str] = set()
        self._flush_handle: asyncio.TimerHandle | None = None
        self._load()

    # -- Loading and flushing ------------------------------------------

    def _load(self) -> None:
        """Populate the cache from the backend."""
        try:
            stored_keys = list(self.backend.keys())
        except Exception:
            logger.warning(
                "Could not list stored mappings; starting empty",
                exc_info=True,
            )
            return

        for storage_key in stored_keys:
            try:
                value = self.backend.get(storage_key)
            except Exception:
                logger.warning(
                    "Could not read %s; skipping", storage_key, exc_info=True
                )
                continue
            if not value:
                continue

            if storage_key.startswith(MAPPING_PREFIX):
                key = storage_key[len(MAPPING_PREFIX):]
                try:
                    self._mappings[key] = _decode_mapping(key, value)
                except (orjson.JSONDecodeError, ValidationError):
                    logger.warning("Skipping undecodable entry %s", storage_key)
            elif storage_key.startswith(DISTINCT_PREFIX):
                pair_key = storage_key[len(DISTINCT_PREFIX):]
                try:
                    self._distinct_pairs[pair_key] = orjson.loads(value)
                except orjson.JSONDecodeError:
                    logger.warning("Skipping undecodable entry %s", storage_key)

        logger.info(
            "Loaded %d learned mappings and %d distinct pairs",
            len(self._mappings),
            len(self._distinct_pairs),
        )

    @property
    def pending_writes(self) -> int:
        """Number of entries changed since the last successful flush."""
        return len(self._dirty)

    def _mark_dirty(self, storage_key: str) -> None:
        self._dirty.add(storage_key)
        self._schedule_flush()

    def _schedule_flush(self) -> None:
        if self.save_delay <= 0 or len(self._dirty) >= self.max_pending_writes:
            self._flush()
            return
        if self._flush_handle is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: batch is written when full, or on force_save/close.
            return
        self._flush_handle = loop.call_later(
            self.save_delay, self._deferred_flush
        )

    def _deferred_flush(self) -> None:
        self._flush_handle = None
        self._flush()

    def _cancel_scheduled_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    def _serialize(self, storage_key: str) -> str | None:
        """Encode the cached entry behind a storage key, None if deleted."""
        if storage_key.startswith(MAPPING_PREFIX):
            mapping = self._mappings.get(storage_key[len(MAPPING_PREFIX):])
            return _encode_mapping(mapping) if mapping else None
        entry = self._distinct_pairs.get(storage_key[len(DISTINCT_PREFIX):])
        return orjson.dumps(entry).decode() if entry else None

    def _flush(self) -> bool:
        """Write every dirty entry to the backend.

        Returns:
            True if all entries were written; False if the backend
            failed (failed entries stay dirty for the next flush).
        """
        self._cancel_scheduled_flush()
        if not self._dirty:
            return True

        written = 0
        try:
            for storage_key in sorted(self._dirty):
                value = self._serialize(storage_key)
                if value is not None:
                    self.backend.set(storage_key, value)
                elif isinstance(self.backend, DeletableBackend):
                    self.backend.delete(storage_key)
                else:
                    # Tombstone: empty values are skipped on load.
                    self.backend.set(storage_key, "")
                self._dirty.discard(storage_key)
                written += 1
        except Exception:
            logger.warning(
                "Failed to persist learned mappings; %d entries pending",
                len(self._dirty),
                exc_info=True,
            )
            return False

        logger.debug("Flushed %d learned-mapping entries", written)
        return True

    def force_save(self) -> bool:
        """Synchronously flush all pending writes.

        Returns:
            True once everything is durable in the backend.
        """
        return self._flush()

    def close(self) -> None:
        """Flush pending writes and cancel any scheduled flush."""
        self.force_save()
        self._cancel_scheduled_flush()

    def __enter__(self) -> "LearningEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Mappings ------------------------------------------------------

    def store_mapping(
        self, raw: str, normalized: str, confidence: float = 1.0
    ) -> LearnedMapping | None:
        """Learn (or reinforce) a raw-name to normalized-name mapping.

        Re-learning a key overwrites the target; the higher of the old
        and new confidence is kept.

        The write is deferred. Outside a running asyncio loop it reaches
        the backend only when ``max_pending_writes`` entries are dirty or
        on :meth:`force_save` / :meth:`close`; callers that skip both
        lose the pending batch.

        Args:
            raw: Raw name as found in the library.
            normalized: User-accepted normalized name.
            confidence: Confidence in [0, 1].

        Returns:
            The stored mapping, or None if either name is empty.

        Raises:
            ValueError: If confidence is outside [0, 1].
        """
        if not 0.0 <= confidence <= 1.0:
            raise ValueError(f"Confidence must be in [0, 1], got {confidence}")

        key = canonical_key(raw)
        target = collapse_whitespace(normalized)
        if not key or not target:
            logger.warning(
                "Ignoring mapping with empty name: %r -> %r", raw, normalized
            )
            return None

        now = _now()
        existing = self._mappings.get(key)
        if existing is not None:
            mapping = existing.model_copy(
                update={
                    "normalized": target,
                    "confidence": max(existing.confidence, confidence),
                    "last_used": now,
                    "usage_count": existing.usage_count + 1,
                }
            )
        else:
            mapping = LearnedMapping(
                key=key,
                raw=collapse_whitespace(raw),
                normalized=target,
                confidence=confidence,
                timestamp=now,
                last_used=now,
            )

        self._mappings[key] = mapping
        logger.debug("Learned %r -> %r", mapping.raw, target)
        self._mark_dirty(MAPPING_PREFIX + key)
        return mapping

    def get_mapping(self, raw: str) -> str | None:
        """Exact-key lookup of a learned normalization; never raises."""
        mapping = self._mappings.get(canonical_key(raw))
        return mapping.normalized if mapping else None

    def get_mapping_details(self, raw: str) -> LearnedMapping | None:
        return self._mappings.get(canonical_key(raw))

    def has_mapping(self, raw: str) -> bool:
        return canonical_key(raw) in self._mappings

    def record_usage(self, raw: str) -> None:
        """Bump usage statistics of an existing mapping."""
        key = canonical_key(raw)
        mapping = self._mappings.get(key)
        if mapping is None:
            return
        self._mappings[key] = mapping.model_copy(
            update={
                "last_used": _now(),
                "usage_count": mapping.usage_count + 1,
            }
        )
        self._mark_dirty(MAPPING_PREFIX + key)

    def find_similar(
        self, raw: str, threshold: float | None = None
    ) -> list[SimilarMapping]:
        """Find stored mappings whose key resembles ``raw``.

        Scans every stored key (O(n) per call) with Jaro-Winkler.

        Args:
            raw: Raw name to look up.
            threshold: Minimum similarity; defaults to the engine's
                ``similarity_threshold``.

        Returns:
            Matches sorted by descending similarity, then usage.
        """
        query = canonical_key(raw)
        if not query:
            return []
        if threshold is None:
            threshold = self.similarity_threshold

        scored: list[tuple[float, LearnedMapping]] = []
        for key, mapping in self._mappings.items():
            similarity = jaro_winkler(query, key)
            if similarity >= threshold:
                scored.append((similarity, mapping))

        scored.sort(key=lambda s: (-s[0], -s[1].usage_count, s[1].key))
        if self.max_suggestions is not None:
            scored = scored[: self.max_suggestions]
        return [
            SimilarMapping(
                raw=mapping.raw,
                normalized=mapping.normalized,
                similarity=similarity,
                confidence=mapping.confidence,
            )
            for similarity, mapping in scored
        ]

    def get_all_mappings(self) -> dict[str, LearnedMapping]:
        """Return a copy of every learned mapping, keyed canonically."""
        return dict(self._mappings)

    def remove_mapping(self, raw: str) -> bool:
        """Manually delete one mapping.

        Returns:
            True if a mapping was removed.
        """
        key = canonical_key(raw)
        if self._mappings.pop(key, None) is None:
            return False
        logger.info("Removed learned mapping for %r", raw)
        self._mark_dirty(MAPPING_PREFIX + key)
        return True

    def clear_all_mappings(self) -> int:
        """Manually delete every mapping.

        Returns:
            Number of mappings removed.
        """
        keys = list(self._mappings)
        self._mappings.clear()
        for key in keys:
            self._dirty.add(MAPPING_PREFIX + key)
        self._flush()
        logger.info("Cleared %d learned mappings", len(keys))
        return len(keys)

    def get_statistics(self) -> MappingStatistics:
        total = len(self._mappings)
        if total == 0:
            return MappingStatistics()
        usage = sum(m.usage_count for m in self._mappings.values())
        confidence = sum(m.confidence for m in self._mappings.values())
        return MappingStatistics(
            total_mappings=total,
            total_usage=usage,
            average_usage=usage / total,
            average_confidence=confidence / total,
        )

    # -- Export / import -----------------------------------------------

    def export_mappings(self) -> dict[str, Any]:
        """Export mappings and distinct pairs for backup or sharing."""
        return {
            "version": EXPORT_VERSION,
            "timestamp": _now().isoformat(),
            "mappings": [
                m.model_dump(mode="json") for m in self._mappings.values()
            ],
            "distinct_pairs": [
                {"key": k, **v} for k, v in self._distinct_pairs.items()
            ],
        }

    def import_mappings(
        self, data: Mapping[str, Any], replace: bool = True
    ) -> int:
        """Import data produced by :meth:`export_mappings`.

        Args:
            data: Exported payload.
            replace: Drop existing mappings first (otherwise merge,
                imported entries winning).

        Returns:
            Number of mappings imported.

        Raises:
            ValueError: If the payload version is unsupported.
            pydantic.ValidationError: If a mapping entry is malformed.
        """
        if data.get("version") != EXPORT_VERSION:
            raise ValueError(
                f"Unsupported import data version: {data.get('version')!r}"
            )

        imported = [
            LearnedMapping.model_validate(entry)
            for entry in data.get("mappings", [])
        ]
        if replace:
            for key in self._mappings:
                self._dirty.add(MAPPING_PREFIX + key)
            self._mappings.clear()
        for mapping in imported:
            self._mappings[mapping.key] = mapping
            self._dirty.add(MAPPING_PREFIX + mapping.key)

        for entry in data.get("distinct_pairs", []):
            pair_key = entry.get("key")
            if pair_key:
                self._distinct_pairs[pair_key] = {
                    k: v for k, v in entry.items() if k != "key"
                }
                self._dirty.add(DISTINCT_PREFIX + pair_key)

        self._flush()
        logger.info("Imported %d learned mappings", len(imported))
        return len(imported)

    # -- Distinct pairs ------------------------------------------------

    @staticmethod
    def _pair_key(name_a: str, name_b: str, scope: str) -> str | None:
        a = canonical_key(name_a)
        b = canonical_key(name_b)
        if not a or not b:
            return None
        first, second = sorted((a, b))
        return f"{scope or 'global'}::{first}|{second}"

    def record_distinct_pair(
        self, name_a: str, name_b: str, scope: str = "global"
    ) -> bool:
        """Remember that two similar names denote different people.

        Returns:
            True if the pair was newly recorded.
        """
        pair_key = self._pair_key(name_a, name_b, scope)
        if pair_key is None or pair_key in self._distinct_pairs:
            return False
        self._distinct_pairs[pair_key] = {
            "scope": scope or "global",
            "timestamp": _now().isoformat(),
        }
        self._mark_dirty(DISTINCT_PREFIX + pair_key)
        return True

    def is_distinct_pair(
        self, name_a: str, name_b: str, scope: str = "global"
    ) -> bool:
        pair_key = self._pair_key(name_a, name_b, scope)
        return pair_key is not None and pair_key in self._distinct_pairs

    def clear_distinct_pair(
        self, name_a: str, name_b: str, scope: str = "global"
    ) -> bool:
        pair_key = self._pair_key(name_a, name_b, scope)
        if pair_key is None or self._distinct_pairs.pop(pair_key, None) is None:
            return False
        self._mark_dirty(DISTINCT_PREFIX + pair_key)
        return True
