"""In-memory persistence backend for tests and ephemeral sessions."""

from collections.abc import Iterable


class MemoryBackend:
    """Dict-backed backend; contents last as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> Iterable[str]:
        return list(self._data)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)
