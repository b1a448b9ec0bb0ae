import yaml
import logging
import logging.config
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and manages engine configuration from YAML file."""
    def __init__(self, config_path: str):
        """Initialize with path to config file."""
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load YAML configuration file."""
        try:
            with open(self.config_path, 'r') as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.error(f"Configuration file not found at '{self.config_path}'")
            raise
        except yaml.YAMLError as e:
            logger.error(f"Malformed YAML in configuration file: {e}")
            raise

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key with optional default."""
        return self.config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self.config[key]

    def get_all(self) -> Dict[str, Any]:
        """Return entire configuration dictionary."""
        return self.config


def setup_logging(config: Dict[str, Any]) -> None:
    """Configure application logging with fallback to basic config."""
    try:
        logging.config.dictConfig(config)
        logging.info("Logging configured successfully from config file.")
    except (ValueError, TypeError, AttributeError) as e:
        # Fallback to a basic configuration if the one in the file is malformed
        logging.basicConfig(level=logging.INFO,
                            format="%(asctime)s - %(levelname)s - %(message)s")
        logging.warning(f"Could not configure logging from dict: {e}. Using basic config.")


@dataclass(frozen=True)
class EngineSettings:
    """
    Tunables shared by every window structure.

    Attributes:
        compensated_summation (bool): Accumulate prefix sums with Neumaier
            compensation so long series do not drift.
        tree_seed (Optional[int]): Seed for order-statistic tree priorities.
            None draws a fresh seed per tree.
    """
    compensated_summation: bool = True
    tree_seed: Optional[int] = None

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]]) -> 'EngineSettings':
        """Build settings from the ``engine`` section of a config file."""
        if not section:
            return cls()
        if not isinstance(section, dict):
            raise InvalidParameterError("engine", section, "mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(section) - known)
        if unknown:
            raise InvalidParameterError("engine", ", ".join(unknown), f"keys among {sorted(known)}")

        settings = cls(**section)
        if not isinstance(settings.compensated_summation, bool):
            raise InvalidParameterError("compensated_summation", settings.compensated_summation, "boolean")
        if settings.tree_seed is not None and not isinstance(settings.tree_seed, int):
            raise InvalidParameterError("tree_seed", settings.tree_seed, "integer or null")
        return settings

    def with_overrides(self, **overrides: Any) -> 'EngineSettings':
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)


_SETTINGS = EngineSettings()


def get_settings() -> EngineSettings:
    """Return the process-wide engine settings."""
    return _SETTINGS


def configure(settings: EngineSettings) -> None:
    """Install process-wide engine settings used by newly created windows."""
    global _SETTINGS
    _SETTINGS = settings
    logger.debug(f"Engine settings updated: {settings}")


def load_settings(config_path: str) -> EngineSettings:
    """Read the ``engine`` section of a YAML config file."""
    loader = ConfigLoader(config_path)
    return EngineSettings.from_dict(loader.get('engine'))
