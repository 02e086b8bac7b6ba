"""
Draft persistence for the submission wizard.

A draft is a JSON-serializable dict ({"values": {...}, "step": n}). Stores are
keyed so a browser-local store, a file, or a test double can stand behind the
same interface.
"""
import json
import logging
import os
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .constants import AUTOSAVE_DELAY_SECONDS

logger = logging.getLogger(__name__)


class DraftStore(ABC):
    @abstractmethod
    def save(self, key: str, payload: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def load(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def clear(self, key: str) -> None:
        ...


class InMemoryDraftStore(DraftStore):
    def __init__(self):
        self._drafts: Dict[str, str] = {}

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        # Stored serialized so callers never share mutable state with the store
        self._drafts[key] = json.dumps(payload)

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._drafts.get(key)
        return json.loads(raw) if raw is not None else None

    def clear(self, key: str) -> None:
        self._drafts.pop(key, None)


class JsonFileDraftStore(DraftStore):
    """One JSON file per key inside a directory"""

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f)
        os.replace(tmp_path, path)

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            # A corrupt draft is discarded rather than blocking the wizard
            logger.warning(f"Ignoring unreadable draft {path}: {e}")
            return None

    def clear(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass


class AutosaveDebouncer:
    """
    Persists the most recent draft only after `delay` seconds without a new
    change. Call poll() from the owner's event loop, or flush() to force it.
    """

    def __init__(self, store: DraftStore, key: str,
                 delay: float = AUTOSAVE_DELAY_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.key = key
        self.delay = delay
        self.clock = clock
        self._pending: Optional[Dict[str, Any]] = None
        self._changed_at: Optional[float] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def schedule(self, payload: Dict[str, Any]) -> None:
        self._pending = payload
        self._changed_at = self.clock()

    def poll(self) -> bool:
        """Save if the quiet period has elapsed. Returns True when a save happened."""
        if self._pending is None:
            return False
        if self.clock() - self._changed_at < self.delay:
            return False
        return self.flush()

    def flush(self) -> bool:
        if self._pending is None:
            return False
        self.store.save(self.key, self._pending)
        self._pending = None
        self._changed_at = None
        return True

    def cancel(self) -> None:
        self._pending = None
        self._changed_at = None
