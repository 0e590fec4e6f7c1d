"""
Storage Package

Backends for the realtime shared store.
"""

from .shared_store import SharedStore, MemoryStore, DisconnectHandle, split_path, get_store, initialize_store

__all__ = ['SharedStore', 'MemoryStore', 'DisconnectHandle', 'split_path', 'get_store', 'initialize_store']
