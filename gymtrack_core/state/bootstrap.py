# =============================================================================
# gymtrack_core/state/bootstrap.py
# Store Construction from Configuration
# =============================================================================

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from gymtrack_core.backends import create_backend
from gymtrack_core.config import AppConfig, load_config
from gymtrack_core.logging import get_logger, setup_logging
from gymtrack_core.offline import LocalCache
from gymtrack_core.state.app_store import AppStore

logger = get_logger(__name__)


def create_app_store(config: Optional[AppConfig] = None, configure_logging: bool = True) -> AppStore:
    """
    Build the application store from configuration.

    Args:
        config: Loaded configuration (default: load_config())
        configure_logging: Whether to apply the [logging] section

    Returns:
        AppStore wired to the configured backend and the on-device cache

    Raises:
        ConfigurationError: unknown backend or missing credentials
    """
    config = config or load_config()

    if configure_logging:
        setup_logging(
            level=getattr(logging, config.logging.level, logging.INFO),
            log_to_file=config.logging.log_to_file,
        )

    backend = create_backend(config)
    cache = LocalCache(config.cache.path)

    logger.info(f"App store ready (backend={backend.name}, cache={config.cache.path})")
    return AppStore(
        backend=backend,
        cache=cache,
        photo_root=Path(config.cache.path).parent / "photos",
    )
