"""YAML config loading for the proxy.

``${VAR}`` and ``$VAR`` placeholders in string values are expanded from the
``.env`` file next to the config, then from the process environment.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

logger = logging.getLogger("gemini-balance.config")

CONFIG_PATH_ENV = "GEMINI_BALANCE_CONFIG"
DEFAULT_CONFIG_PATH = "configs/config_default.yaml"

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def config_file_path(path: str | None = None) -> Path:
    """Absolute config path; relative paths are taken from the project root."""
    candidate = Path(path or os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    if candidate.is_absolute():
        return candidate
    return Path(__file__).parent.parent / candidate


def _dotenv_for(config_path: Path) -> dict[str, str]:
    env_file = config_path.with_name(".env")
    if not env_file.exists():
        return {}
    logger.info("Loading placeholder values from %s", env_file)
    return {key: value for key, value in dotenv_values(env_file).items() if value is not None}


def load_config(path: str | None = None) -> dict:
    """Parse the proxy config file and expand its placeholders.

    Raises RuntimeError when the file does not exist.
    """
    config_path = config_file_path(path)
    if not config_path.exists():
        logger.error("Config file not found: %s", config_path)
        raise RuntimeError(f"Config file not found: {config_path}")

    logger.info("Loading configuration from %s", config_path)
    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    return expand_placeholders(data, _dotenv_for(config_path))


def expand_placeholders(obj: Any, env_values: Mapping[str, str] | None = None) -> Any:
    """Expand placeholders in every string of a parsed YAML tree.

    Unset variables keep their literal placeholder.
    """
    env_values = env_values or {}

    if isinstance(obj, dict):
        return {key: expand_placeholders(value, env_values) for key, value in obj.items()}
    if isinstance(obj, list):
        return [expand_placeholders(item, env_values) for item in obj]
    if not isinstance(obj, str):
        return obj

    def lookup(match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        value = env_values.get(name, os.getenv(name))
        if value is None:
            logger.warning("Config placeholder $%s is not set; keeping it literally", name)
            return match.group(0)
        return value

    return _PLACEHOLDER.sub(lookup, obj)
