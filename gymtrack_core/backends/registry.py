# =============================================================================
# gymtrack_core/backends/registry.py
# Backend Selection by Configuration
# =============================================================================

from __future__ import annotations
from typing import Dict, Type

from gymtrack_core.backends.base import RemoteBackend
from gymtrack_core.backends.firestore_backend import FirestoreBackend
from gymtrack_core.backends.null_backend import NullBackend
from gymtrack_core.backends.supabase_backend import SupabaseBackend
from gymtrack_core.config import AppConfig
from gymtrack_core.errors import ConfigurationError
from gymtrack_core.logging import get_logger

logger = get_logger(__name__)

# Registry of available backends
BACKENDS: Dict[str, Type[RemoteBackend]] = {
    "local": NullBackend,
    "firestore": FirestoreBackend,
    "supabase": SupabaseBackend,
}


def create_backend(config: AppConfig) -> RemoteBackend:
    """
    Instantiate the backend selected by config.backend.

    Raises:
        ConfigurationError: unknown provider or missing credentials
    """
    backend_cls = BACKENDS.get(config.backend)
    if backend_cls is None:
        raise ConfigurationError(
            f"Unknown backend provider: {config.backend}",
            config_key="backend",
            details={"supported": sorted(BACKENDS)},
        )

    config.validate()
    backend = backend_cls.from_config(config)
    logger.info(f"Remote backend: {backend.name}")
    return backend
