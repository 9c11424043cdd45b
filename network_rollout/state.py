"""Persisted key-value state owned by the rollout engine.

The database cluster initiator is the only fact that survives across passes
through this store. It is read and written through ``StateStore`` so the
election logic does not depend on the object that happens to hold it. The IP
family marker lives on the DaemonSets themselves; see ``apply.annotate_family_mode``.
"""

from typing import Protocol


class StateStore(Protocol):
    """Minimal get/set contract for persisted annotations."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if unset."""
        ...

    def set(self, key: str, value: str) -> None:
        """Persist a value."""
        ...


class MemoryStateStore:
    """Dictionary-backed store, used for offline simulation and tests."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes.append((key, value))
