"""
Remote backend adapters: a shared contract and three interchangeable
variants selected by configuration.
"""

from .base import ORDER_FIELDS, AuthProvider, BlobStorage, RemoteBackend, RemoteCategory
from .field_mapping import CATEGORY_RECORD_TYPES, TABLES, column_map, from_row, to_row
from .null_backend import NullBackend, local_account_id
from .firestore_backend import FirestoreBackend
from .supabase_backend import SupabaseBackend
from .registry import BACKENDS, create_backend

__all__ = [
    "ORDER_FIELDS",
    "AuthProvider",
    "BlobStorage",
    "RemoteBackend",
    "RemoteCategory",
    "CATEGORY_RECORD_TYPES",
    "TABLES",
    "column_map",
    "from_row",
    "to_row",
    "NullBackend",
    "local_account_id",
    "FirestoreBackend",
    "SupabaseBackend",
    "BACKENDS",
    "create_backend",
]
