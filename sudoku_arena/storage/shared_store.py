"""
Realtime Shared Store

Path-addressed record store shared by every client of a match. Paths are
slash separated (``rooms/ABC123/players/p1``). Subscribers receive the full
value at their path after every change at, above or below it, and ``None``
once nothing is stored there.
"""

import copy
import itertools
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..utils.game_logger import game_logger

Callback = Callable[[Any], None]


def split_path(path: str) -> List[str]:
    """Split a store path into segments, rejecting empty segments."""
    if not isinstance(path, str):
        raise ValueError("Store path must be a string")
    stripped = path.strip('/')
    if not stripped:
        return []
    segments = stripped.split('/')
    if any(not segment for segment in segments):
        raise ValueError(f"Invalid store path '{path}'")
    return segments


def _related(a: List[str], b: List[str]) -> bool:
    """True when one path is a prefix of the other."""
    shortest = min(len(a), len(b))
    return a[:shortest] == b[:shortest]


class DisconnectHandle:
    """
    A write the store performs when its client disconnects uncleanly.

    With `only_if_exists` the write lands only while the record holding the
    field (the parent path) is still stored.
    """

    def __init__(self, store: 'SharedStore', client_id: str, path: str, value: Any,
                 only_if_exists: bool = False):
        self.store = store
        self.client_id = client_id
        self.path = path
        self.value = value
        self.only_if_exists = only_if_exists

    def cancel(self):
        self.store._cancel_disconnect_write(self)


class SharedStore(ABC):
    """
    Capabilities consumed by the engine: read, write, partial multi-path
    update, atomic read-modify-write, subscription and disconnect-triggered
    writes.
    """

    def __init__(self):
        self._subscribers: Dict[int, Tuple[List[str], Callback]] = {}
        self._subscriber_ids = itertools.count()
        self._disconnect_writes: Dict[str, List[DisconnectHandle]] = {}
        self._registry_lock = threading.RLock()

    @abstractmethod
    def get(self, path: str) -> Any:
        """Return a copy of the value stored at `path`, or None."""

    @abstractmethod
    def set(self, path: str, value: Any) -> None:
        """Replace the value at `path`. A None value deletes it."""

    @abstractmethod
    def update(self, path: str, partial: Dict[str, Any]) -> None:
        """Write each key of `partial` (which may itself contain '/') below `path`."""

    @abstractmethod
    def atomic_update(self, path: str, fn: Callable[[Any], Any]) -> Any:
        """Apply `fn(current) -> next` atomically and return the stored result."""

    def remove(self, path: str) -> None:
        self.set(path, None)

    def server_timestamp(self) -> int:
        """Backend clock in epoch milliseconds."""
        return int(time.time() * 1000)

    def close(self) -> None:
        """Release backend resources on shutdown."""

    def subscribe(self, path: str, callback: Callback) -> Callable[[], None]:
        """
        Watch `path`. The callback fires immediately with the current value.

        Returns:
            A function that removes the subscription
        """
        segments = split_path(path)
        with self._registry_lock:
            subscriber_id = next(self._subscriber_ids)
            self._subscribers[subscriber_id] = (segments, callback)

        def unsubscribe():
            with self._registry_lock:
                self._subscribers.pop(subscriber_id, None)

        self._deliver(segments, callback)
        return unsubscribe

    def on_disconnect_write(self, client_id: str, path: str, value: Any,
                            only_if_exists: bool = False) -> DisconnectHandle:
        """Register `value` to be written at `path` if `client_id` drops."""
        handle = DisconnectHandle(self, client_id, path, value, only_if_exists)
        with self._registry_lock:
            self._disconnect_writes.setdefault(client_id, []).append(handle)
        return handle

    def disconnect(self, client_id: str) -> int:
        """Perform every write registered for a dropped client. Returns the count."""
        with self._registry_lock:
            handles = self._disconnect_writes.pop(client_id, [])
        for handle in handles:
            try:
                if handle.only_if_exists:
                    self._write_into_existing(handle.path, handle.value)
                else:
                    self.set(handle.path, handle.value)
            except Exception as e:
                game_logger.log_remote_failure('on_disconnect_write', handle.path, e)
        return len(handles)

    def _write_into_existing(self, path: str, value: Any) -> None:
        parent, _, key = path.strip('/').rpartition('/')
        if not parent or self.get(parent) is None:
            return

        def apply(current):
            if not isinstance(current, dict):
                return current
            return {**current, key: value}

        self.atomic_update(parent, apply)

    def _cancel_disconnect_write(self, handle: DisconnectHandle):
        with self._registry_lock:
            handles = self._disconnect_writes.get(handle.client_id, [])
            if handle in handles:
                handles.remove(handle)
            if not handles:
                self._disconnect_writes.pop(handle.client_id, None)

    def _notify(self, changed: List[List[str]]):
        """Deliver fresh values to every subscriber related to a changed path."""
        with self._registry_lock:
            targets = [
                (segments, callback) for segments, callback in self._subscribers.values()
                if any(_related(segments, path) for path in changed)
            ]
        for segments, callback in targets:
            self._deliver(segments, callback)

    def _deliver(self, segments: List[str], callback: Callback):
        try:
            callback(self.get('/'.join(segments)))
        except Exception as e:
            game_logger.log_error(None, e, 'store_subscriber_callback', '/'.join(segments))


class MemoryStore(SharedStore):
    """In-process store: nested dictionaries guarded by a lock."""

    def __init__(self):
        super().__init__()
        self._data: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def get(self, path: str) -> Any:
        with self._lock:
            return copy.deepcopy(self._read(split_path(path)))

    def set(self, path: str, value: Any) -> None:
        segments = split_path(path)
        with self._lock:
            self._write(segments, value)
        self._notify([segments])

    def update(self, path: str, partial: Dict[str, Any]) -> None:
        base = split_path(path)
        changed = []
        with self._lock:
            for key, value in partial.items():
                segments = base + split_path(key)
                self._write(segments, value)
                changed.append(segments)
        self._notify(changed)

    def atomic_update(self, path: str, fn: Callable[[Any], Any]) -> Any:
        segments = split_path(path)
        with self._lock:
            current = copy.deepcopy(self._read(segments))
            result = fn(current)
            self._write(segments, result)
            stored = copy.deepcopy(result)
        self._notify([segments])
        return stored

    def _read(self, segments: List[str]) -> Any:
        node: Any = self._data
        for segment in segments:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        return node

    def _write(self, segments: List[str], value: Any):
        if not segments:
            raise ValueError("Cannot write to the store root")

        if value is None:
            # Delete, then prune parents left empty
            trail = []
            node: Any = self._data
            for segment in segments[:-1]:
                if not isinstance(node, dict) or segment not in node:
                    return
                trail.append((node, segment))
                node = node[segment]
            if isinstance(node, dict):
                node.pop(segments[-1], None)
            for parent, segment in reversed(trail):
                if parent[segment] == {}:
                    del parent[segment]
                else:
                    break
            return

        node = self._data
        for segment in segments[:-1]:
            if not isinstance(node.get(segment), dict):
                node[segment] = {}
            node = node[segment]
        node[segments[-1]] = copy.deepcopy(value)


# Global store instance
_store = None


def get_store() -> Optional[SharedStore]:
    """Get the global shared store instance."""
    return _store


def initialize_store(config_class=None, store: Optional[SharedStore] = None) -> SharedStore:
    """
    Initialize the global shared store.

    A MongoDB-backed store is used when the configuration names a MONGO_URI,
    otherwise an in-process MemoryStore.
    """
    global _store
    if store is not None:
        _store = store
    elif config_class is not None and getattr(config_class, 'MONGO_URI', None):
        from .mongo_store import MongoStore
        _store = MongoStore(config_class.MONGO_URI, getattr(config_class, 'MONGO_DB_NAME', 'sudoku_arena'))
    else:
        _store = MemoryStore()
    return _store
