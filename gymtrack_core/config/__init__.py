from .settings import (
    AppConfig,
    CacheConfig,
    FirebaseConfig,
    LoggingConfig,
    SupabaseConfig,
    SUPPORTED_BACKENDS,
    load_config,
)

__all__ = [
    "AppConfig",
    "CacheConfig",
    "FirebaseConfig",
    "LoggingConfig",
    "SupabaseConfig",
    "SUPPORTED_BACKENDS",
    "load_config",
]
