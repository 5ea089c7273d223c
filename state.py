"""
Live household snapshot with batched change notification and
on-device persistence.

``HouseholdStore.update`` applies a batch of field changes, saves the
snapshot once, then calls every observer once for the whole batch.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np

import config as cfg

logger = logging.getLogger(__name__)

Observer = Callable[[Dict[str, Any]], None]


def _json_default(o):
    # numpy scalars leak in from the vectorised tax functions
    if isinstance(o, np.ndarray):
        return o.tolist()
    if isinstance(o, np.generic):
        return o.item()
    raise TypeError(f"Object of type {o.__class__.__name__} is not JSON serializable")


# ─── Snapshot stores ─────────────────────────────────────────────────

class MemorySnapshotStore:
    """Key-value store held in memory; nothing survives the process."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class SnapshotStore:
    """Key-value store backed by one JSON file per key in *directory*."""

    def __init__(self, directory: str) -> None:
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        tmp = self._path(key) + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp, self._path(key))

    def remove(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


# ─── Household store ─────────────────────────────────────────────────

class HouseholdStore:
    """Owns the mutable household snapshot for one session."""

    def __init__(
        self,
        initial: Optional[Mapping[str, Any]] = None,
        storage: Optional[Any] = None,
        key: str = cfg.SNAPSHOT_KEY,
    ) -> None:
        self._data: Dict[str, Any] = cfg.defaults()
        if initial:
            self._data.update(initial)
        self._storage = storage if storage is not None else MemorySnapshotStore()
        self._key = key
        self._observers: List[Observer] = []

    @property
    def data(self) -> Dict[str, Any]:
        """A copy of the current snapshot."""
        return json.loads(json.dumps(self._data, default=_json_default))

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register *observer*; returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def update(self, changes: Mapping[str, Any]) -> None:
        """Apply *changes* as one batch, persist, then notify observers once."""
        if not changes:
            return
        for key, value in changes.items():
            if key == "split_types" and isinstance(value, Mapping):
                merged = dict(self._data.get("split_types") or {})
                merged.update(value)
                value = merged
            self._data[key] = value
        self.persist()
        snapshot = self.data
        for observer in list(self._observers):
            observer(snapshot)

    def persist(self) -> None:
        self._storage.set(self._key, json.dumps(self._data, default=_json_default))

    def hydrate(self) -> Dict[str, Any]:
        """Merge a previously saved snapshot into the live one."""
        cached = self._storage.get(self._key)
        if cached:
            try:
                parsed = json.loads(cached)
            except ValueError:
                logger.error("Failed to hydrate state from %r", self._key, exc_info=True)
            else:
                if isinstance(parsed, dict):
                    self.update(parsed)
                else:
                    logger.error("Ignoring saved snapshot %r: not an object", self._key)
        return self.data

    def clear(self) -> None:
        """Forget the saved snapshot and start over from the defaults."""
        self._storage.remove(self._key)
        self._data = {}
        self.update(cfg.defaults())
