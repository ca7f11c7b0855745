from .loader import ConfigError, load_config, parse_config
from .models import HandoffConfig

# Config exports are intentionally small.
__all__ = ["ConfigError", "HandoffConfig", "load_config", "parse_config"]
