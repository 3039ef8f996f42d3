from letterbox.config.loader import DEFAULT_CONFIG_PATH, load_config
from letterbox.config.models import AppConfig

__all__ = ["AppConfig", "DEFAULT_CONFIG_PATH", "load_config"]
