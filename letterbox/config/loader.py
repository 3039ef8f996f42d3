import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from letterbox.config.models import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("letterbox.yaml")
CONFIG_PATH_ENV = "LETTERBOX_CONFIG"

# env var -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "LETTERBOX_BASE_URL": ("net", "base_url"),
    "LETTERBOX_DB_PATH": ("database", "path"),
    "LETTERBOX_EMAIL_URL": ("email", "base_url"),
    "LETTERBOX_EMAIL_TOKEN": ("email", "auth_token"),
    "LETTERBOX_EMAIL_BACKEND": ("email", "backend"),
}


def resolve_config_path(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> Path:
    env = os.environ if environ is None else environ
    if path is not None:
        return path
    if env.get(CONFIG_PATH_ENV):
        return Path(env[CONFIG_PATH_ENV])
    return DEFAULT_CONFIG_PATH


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    for var, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            section_data = data.setdefault(section, {})
            if not isinstance(section_data, dict):
                raise ValueError(f"Config section '{section}' must be a mapping")
            section_data[key] = value
    return data


def load_config(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> AppConfig:
    """
    Load and validate the config file, then apply environment overrides.
    A missing file at the default location yields defaults; an explicitly
    requested file must exist.
    Raises ValueError if the YAML or the schema is invalid.
    """
    env = os.environ if environ is None else environ
    explicit = path is not None or bool(env.get(CONFIG_PATH_ENV))
    config_path = resolve_config_path(path, env)

    data: Any = {}
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML syntax in config file: {e}") from e
    elif explicit:
        raise FileNotFoundError(f"Config file not found at: {config_path}")
    else:
        logger.info("No config file at %s, using defaults", config_path)

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    data = apply_env_overrides(data, env)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Config validation failed:\n{e}") from e
