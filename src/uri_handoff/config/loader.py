from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from uri_handoff.config.models import HandoffConfig


class ConfigError(ValueError):
    # Raised for invalid configuration (fail fast).
    pass


def load_config(path: Path) -> HandoffConfig:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config is not valid YAML: {exc}") from exc
    if raw is None:
        raw = {}
    return parse_config(raw)


def parse_config(raw: object) -> HandoffConfig:
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")
    try:
        return HandoffConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
