"""
Application state: the local-first store and its construction.
"""

from .app_store import AppState, AppStore, AuthStatus, COLLECTIONS, CollectionBinding, decode_records
from .bootstrap import create_app_store

__all__ = [
    "AppState",
    "AppStore",
    "AuthStatus",
    "COLLECTIONS",
    "CollectionBinding",
    "decode_records",
    "create_app_store",
]
