# =============================================================================
# gymtrack_core/config/settings.py
# Application Configuration
# =============================================================================
"""
Configuration loading for GymTrack Core.

Settings come from an optional TOML file and are then overridden by
environment variables. Expected file format:

    backend = "supabase"              # "local" | "firestore" | "supabase"
    oauth_redirect_uri = "gymtrackpro://auth/callback"

    [cache]
    path = "local_data/gymtrack.db"

    [logging]
    level = "INFO"
    log_to_file = false

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"
    photo_bucket = "progress-photos"

    [firebase]
    api_key = "your-web-api-key"
    credentials_path = "service-account.json"
    storage_bucket = "your-project.appspot.com"
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from gymtrack_core.errors import ConfigurationError
from gymtrack_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("gymtrack.toml")
DEFAULT_CACHE_PATH = Path("local_data") / "gymtrack.db"

SUPPORTED_BACKENDS = ("local", "firestore", "supabase")

# Environment variable -> (section, key); section None means top level
ENV_OVERRIDES = {
    "GYMTRACK_BACKEND": (None, "backend"),
    "GYMTRACK_CACHE_PATH": ("cache", "path"),
    "GYMTRACK_LOG_LEVEL": ("logging", "level"),
    "SUPABASE_URL": ("supabase", "url"),
    "SUPABASE_KEY": ("supabase", "key"),
    "FIREBASE_API_KEY": ("firebase", "api_key"),
    "FIREBASE_CREDENTIALS": ("firebase", "credentials_path"),
    "FIREBASE_STORAGE_BUCKET": ("firebase", "storage_bucket"),
}


@dataclass
class SupabaseConfig:
    """Relational backend settings"""
    url: str = ""
    key: str = ""
    photo_bucket: str = "progress-photos"

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


@dataclass
class FirebaseConfig:
    """Document-store backend settings"""
    api_key: str = ""
    credentials_path: Optional[str] = None
    storage_bucket: Optional[str] = None
    request_timeout: int = 30

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class CacheConfig:
    path: Path = DEFAULT_CACHE_PATH


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_to_file: bool = False


@dataclass
class AppConfig:
    """Top-level configuration for the data layer"""
    backend: str = "local"
    oauth_redirect_uri: str = "gymtrackpro://auth/callback"
    password_reset_redirect_uri: str = "gymtrackpro://auth/reset"
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    firebase: FirebaseConfig = field(default_factory=FirebaseConfig)

    def validate(self) -> None:
        """
        Check the selected backend has what it needs.

        Raises:
            ConfigurationError: unknown backend or missing credentials
        """
        if self.backend not in SUPPORTED_BACKENDS:
            raise ConfigurationError(
                f"Unknown backend provider: {self.backend}",
                config_key="backend",
                details={"supported": list(SUPPORTED_BACKENDS)},
            )

        if self.backend == "supabase" and not self.supabase.is_configured:
            raise ConfigurationError(
                "Supabase backend selected but url/key are missing",
                config_key="supabase",
            )

        if self.backend == "firestore" and not self.firebase.is_configured:
            raise ConfigurationError(
                "Firestore backend selected but api_key is missing",
                config_key="firebase.api_key",
            )

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> AppConfig:
        """Build config from a parsed TOML mapping"""
        cache_raw = raw.get("cache", {})
        logging_raw = raw.get("logging", {})
        supabase_raw = raw.get("supabase", {})
        firebase_raw = raw.get("firebase", {})

        return cls(
            backend=str(raw.get("backend", "local")).strip().lower(),
            oauth_redirect_uri=raw.get("oauth_redirect_uri", cls.oauth_redirect_uri),
            password_reset_redirect_uri=raw.get(
                "password_reset_redirect_uri", cls.password_reset_redirect_uri
            ),
            cache=CacheConfig(path=Path(cache_raw.get("path", DEFAULT_CACHE_PATH))),
            logging=LoggingConfig(
                level=str(logging_raw.get("level", "INFO")).upper(),
                log_to_file=bool(logging_raw.get("log_to_file", False)),
            ),
            supabase=SupabaseConfig(
                url=supabase_raw.get("url", ""),
                key=supabase_raw.get("key", ""),
                photo_bucket=supabase_raw.get("photo_bucket", "progress-photos"),
            ),
            firebase=FirebaseConfig(
                api_key=firebase_raw.get("api_key", ""),
                credentials_path=firebase_raw.get("credentials_path"),
                storage_bucket=firebase_raw.get("storage_bucket"),
                request_timeout=int(firebase_raw.get("request_timeout", 30)),
            ),
        )


def _apply_env_overrides(raw: Dict[str, Any], environ: Dict[str, str]) -> Dict[str, Any]:
    merged = {k: (dict(v) if isinstance(v, dict) else v) for k, v in raw.items()}

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if not value:
            continue
        if section is None:
            merged[key] = value
        else:
            merged.setdefault(section, {})[key] = value

    return merged


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
    validate: bool = True,
) -> AppConfig:
    """
    Load configuration from TOML and environment.

    Args:
        path: TOML file to read (default: ./gymtrack.toml, skipped if missing)
        environ: Environment mapping (default: os.environ)
        validate: Whether to validate the selected backend

    Returns:
        AppConfig instance

    Raises:
        ConfigurationError: unreadable TOML or invalid settings
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    environ = os.environ if environ is None else environ

    raw: Dict[str, Any] = {}
    if config_path.exists():
        try:
            raw = toml.load(config_path)
            logger.debug(f"Loaded configuration from {config_path}")
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigurationError(
                f"Could not read configuration file: {e}",
                config_key=str(config_path),
            ) from e
    elif path is not None:
        raise ConfigurationError(
            f"Configuration file not found: {config_path}",
            config_key=str(config_path),
        )

    config = AppConfig.from_dict(_apply_env_overrides(raw, environ))

    if validate:
        config.validate()

    logger.info(f"Configuration loaded. Backend: {config.backend}")
    return config
