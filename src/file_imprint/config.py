"""Configuration models and multi-source loader.

Sources are merged in priority order (later wins):

1. ``defaults.toml`` shipped with the package (or an explicit defaults path)
2. System config: ``/etc/file-imprint/config.toml`` (``%PROGRAMDATA%`` on Windows)
3. User config: ``config.toml`` in the platformdirs user config directory
4. Environment variables: ``FILE_IMPRINT_<SECTION>_<KEY>``

The sample window size is fixed and intentionally not configurable.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Generic, Optional, Type, TypeVar

import platformdirs
import toml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .digest import DEFAULT_ALGORITHM, HashlibHashFunction, get_hash_function
from .logging_config import LoggingConfig

logger = logging.getLogger(__name__)

APP_NAME = "file-imprint"
DEFAULTS_PATH = Path(__file__).parent / "defaults.toml"

T = TypeVar('T', bound=BaseModel)


class DigestConfig(BaseModel):
    """Digest backend selection."""

    model_config = ConfigDict(extra='forbid')

    algorithm: str = Field(
        default=DEFAULT_ALGORITHM,
        description="hashlib algorithm used for head and tail digests"
    )

    @field_validator('algorithm', mode='before')
    @classmethod
    def validate_algorithm(cls, v: Any) -> Any:
        """Normalize the name and reject algorithms that are not registered."""
        if isinstance(v, str):
            # Raises UnsupportedAlgorithmError, a ValueError, so pydantic
            # reports it as a validation error.
            return get_hash_function(v).name
        return v


class ImprintConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    digest: DigestConfig = Field(default_factory=DigestConfig)

    def hash_function(self) -> HashlibHashFunction:
        """Hash function selected by ``digest.algorithm``."""
        return get_hash_function(self.digest.algorithm)


class ConfigLoader(Generic[T]):
    """Loads configuration from multiple sources with priority."""

    def __init__(self, app_name: str = APP_NAME, config_class: Type[T] = ImprintConfig) -> None:
        self.app_name = app_name
        self.config_class = config_class
        self._config: Optional[T] = None

    def load(self, defaults_path: Optional[Path] = None) -> T:
        """Load configuration from all sources.

        Args:
            defaults_path: Optional path to a defaults.toml file replacing the
                one shipped with the package

        Returns:
            Validated configuration object

        Raises:
            pydantic.ValidationError: If the merged configuration is invalid
            toml.TomlDecodeError: If a config file cannot be parsed
        """
        config_dict = self._load_defaults(defaults_path)

        system_config = self._load_system_config()
        if system_config:
            config_dict = self._deep_merge(config_dict, system_config)

        user_config = self._load_user_config()
        if user_config:
            config_dict = self._deep_merge(config_dict, user_config)

        config_dict = self._apply_env_overrides(config_dict)

        self._config = self.config_class(**config_dict)
        return self._config

    def _load_defaults(self, defaults_path: Optional[Path] = None) -> Dict[str, Any]:
        """Load defaults, falling back to an empty dict."""
        if defaults_path is not None:
            logger.debug(f"Loading defaults: {{'path': {str(defaults_path)!r}}}")
            return toml.load(defaults_path)

        possible_paths = [
            DEFAULTS_PATH,
            Path.cwd() / "config" / "defaults.toml",
        ]
        for path in possible_paths:
            if path.exists():
                logger.debug(f"Loading defaults: {{'path': {str(path)!r}}}")
                return toml.load(path)

        return {}

    def _system_config_path(self) -> Path:
        if os.name == "nt":
            return (
                Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData"))
                / self.app_name
                / "config.toml"
            )
        return Path(f"/etc/{self.app_name}/config.toml")

    def _load_system_config(self) -> Optional[Dict[str, Any]]:
        system_path = self._system_config_path()
        if system_path.exists():
            logger.debug(f"Loading system config: {{'path': {str(system_path)!r}}}")
            return toml.load(system_path)
        return None

    def _load_user_config(self) -> Optional[Dict[str, Any]]:
        user_config_dir = platformdirs.user_config_dir(appname=self.app_name, appauthor=False)
        user_config_path = Path(user_config_dir) / "config.toml"

        if user_config_path.exists():
            logger.debug(f"Loading user config: {{'path': {str(user_config_path)!r}}}")
            return toml.load(user_config_path)

        logger.debug(f"User config not found: {{'path': {str(user_config_path)!r}}}")
        return None

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Override config with FILE_IMPRINT_<SECTION>_<KEY> variables."""
        prefix = f"{self.app_name.upper().replace('-', '_')}_"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            # FILE_IMPRINT_DIGEST_ALGORITHM -> digest.algorithm
            key_path = env_key[len(prefix):].lower().split("_", 1)
            if len(key_path) != 2:
                logger.warning(f"Ignoring environment override without section: {{'variable': {env_key!r}}}")
                continue

            section, key = key_path
            current = config.setdefault(section, {})
            if not isinstance(current, dict):
                logger.warning(f"Ignoring environment override for non-table section: {{'variable': {env_key!r}}}")
                continue
            current[key] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Convert an environment string to bool, number or string."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    @property
    def config(self) -> T:
        """Loaded configuration, loading it on first access."""
        if self._config is None:
            self._config = self.load()
        return self._config


def load_config(defaults_path: Optional[Path] = None) -> ImprintConfig:
    """Load ``ImprintConfig`` from all configuration sources."""
    return ConfigLoader(APP_NAME, ImprintConfig).load(defaults_path)
