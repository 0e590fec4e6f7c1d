"""
MongoDB Shared Store

Maps store paths onto MongoDB: the first segment names a collection, the
second a document ``_id`` and the rest a dotted field inside that document.
Every write stamps a fresh ``_rev`` token so ``atomic_update`` can perform an
optimistic compare-and-swap. Change notifications are fanned out to
subscribers inside this process.
"""

import copy
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from pymongo import MongoClient
from pymongo.errors import DuplicateKeyError
from pymongo.server_api import ServerApi

from .shared_store import SharedStore, split_path

MAX_TRANSACTION_ATTEMPTS = 25


def _new_rev() -> str:
    return uuid.uuid4().hex


def _strip_meta(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    return {key: value for key, value in document.items() if key not in ('_id', '_rev')}


def _extract(document: Optional[Dict[str, Any]], field_parts: List[str]) -> Any:
    value: Any = _strip_meta(document)
    for part in field_parts:
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return copy.deepcopy(value)


def _nest(field_parts: List[str], value: Any) -> Dict[str, Any]:
    """Build a nested document holding `value` at `field_parts`."""
    for part in reversed(field_parts):
        value = {part: value}
    return value


class MongoStore(SharedStore):
    """Shared store persisted in MongoDB."""

    def __init__(self, mongo_uri: Optional[str], db_name: str = 'sudoku_arena', client=None):
        """
        Args:
            mongo_uri: MongoDB connection string
            db_name: Database holding one collection per top-level path segment
            client: Pre-built client, mainly for tests
        """
        super().__init__()
        self.client = client if client is not None else MongoClient(mongo_uri, server_api=ServerApi('1'))
        self.db = self.client[db_name]

        # Test connection
        try:
            self.client.admin.command('ping')
            print("Successfully connected to MongoDB!")
        except Exception as e:
            print(f"MongoDB connection error: {e}")
            raise

    def _locate(self, path: str) -> Tuple[Any, str, List[str]]:
        segments = split_path(path)
        if len(segments) < 2:
            raise ValueError(f"MongoStore paths need a collection and a document id: '{path}'")
        return self.db[segments[0]], segments[1], segments[2:]

    def get(self, path: str) -> Any:
        collection, doc_id, field_parts = self._locate(path)
        return _extract(collection.find_one({'_id': doc_id}), field_parts)

    def set(self, path: str, value: Any) -> None:
        collection, doc_id, field_parts = self._locate(path)
        if not field_parts:
            if value is None:
                collection.delete_one({'_id': doc_id})
            else:
                collection.replace_one({'_id': doc_id}, {**value, '_rev': _new_rev()}, upsert=True)
        elif value is None:
            collection.update_one({'_id': doc_id}, {'$unset': {'.'.join(field_parts): ''},
                                                    '$set': {'_rev': _new_rev()}})
        else:
            collection.update_one({'_id': doc_id}, {'$set': {'.'.join(field_parts): value, '_rev': _new_rev()}},
                                  upsert=True)
        self._notify([split_path(path)])

    def update(self, path: str, partial: Dict[str, Any]) -> None:
        collection, doc_id, field_parts = self._locate(path)
        to_set: Dict[str, Any] = {'_rev': _new_rev()}
        to_unset: Dict[str, str] = {}
        changed = []
        for key, value in partial.items():
            parts = field_parts + split_path(key)
            changed.append(split_path(path) + split_path(key))
            if value is None:
                to_unset['.'.join(parts)] = ''
            else:
                to_set['.'.join(parts)] = value
        operations: Dict[str, Any] = {'$set': to_set}
        if to_unset:
            operations['$unset'] = to_unset
        collection.update_one({'_id': doc_id}, operations, upsert=True)
        self._notify(changed)

    def atomic_update(self, path: str, fn: Callable[[Any], Any]) -> Any:
        collection, doc_id, field_parts = self._locate(path)
        for _ in range(MAX_TRANSACTION_ATTEMPTS):
            document = collection.find_one({'_id': doc_id})
            result = fn(_extract(document, field_parts))

            if document is None:
                if result is None:
                    return None
                body = result if not field_parts else _nest(field_parts, result)
                try:
                    collection.insert_one({'_id': doc_id, **body, '_rev': _new_rev()})
                except DuplicateKeyError:
                    continue
                break

            guard = {'_id': doc_id, '_rev': document.get('_rev')}
            if not field_parts:
                if result is None:
                    outcome = collection.delete_one(guard)
                    if outcome.deleted_count:
                        break
                    continue
                outcome = collection.replace_one(guard, {**result, '_rev': _new_rev()})
            elif result is None:
                outcome = collection.update_one(guard, {'$unset': {'.'.join(field_parts): ''},
                                                        '$set': {'_rev': _new_rev()}})
            else:
                outcome = collection.update_one(guard, {'$set': {'.'.join(field_parts): result,
                                                                 '_rev': _new_rev()}})
            if outcome.matched_count:
                break
        else:
            raise RuntimeError(f"atomic_update on '{path}' kept conflicting")

        self._notify([split_path(path)])
        return copy.deepcopy(result)

    def close(self):
        """Close the MongoDB connection."""
        if self.client:
            self.client.close()
