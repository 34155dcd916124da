"""
Configuration loader for Tieto.

Precedence, lowest to highest: built-in defaults, YAML file, TIETO_*
environment variables. CLI flags are applied on top by the caller.

Example `tieto.yaml`:

    topics_root: topics
    embedding_url: http://127.0.0.1:8080/embedding
    completion_url: http://127.0.0.1:8080/completion
    min_similarity_threshold: 0.42
    top_k: 3
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.exceptions import ConfigError
from ..core.types import TietoConfig


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TIETO_CONFIG"
DEFAULT_CONFIG_FILE = "tieto.yaml"


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration mapping.

    Raises:
        ConfigError: If the file is missing, unreadable, or not a mapping
    """
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    logger.info(f"Loading config from: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def resolve_config_path(config_path=None, environ=None) -> Optional[Path]:
    """Explicit path, else $TIETO_CONFIG, else ./tieto.yaml if present."""
    environ = os.environ if environ is None else environ
    if config_path:
        return Path(config_path)
    if environ.get(CONFIG_ENV_VAR):
        return Path(environ[CONFIG_ENV_VAR])
    default = Path(DEFAULT_CONFIG_FILE)
    return default if default.exists() else None


def load_config(config_path=None, environ=None, **overrides: Any) -> TietoConfig:
    """
    Build the effective configuration.

    Args:
        config_path: Optional YAML file
        environ: Environment mapping (defaults to os.environ)
        **overrides: Final overrides; None values are ignored

    Returns:
        Validated TietoConfig
    """
    config = TietoConfig()

    path = resolve_config_path(config_path, environ)
    if path is not None:
        config = TietoConfig.from_mapping(read_config_file(path), base=config)

    config = TietoConfig.from_env(base=config, environ=environ)
    return config.with_overrides(**overrides)
