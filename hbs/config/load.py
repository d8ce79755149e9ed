from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .model import EngineConfig
from .typed import ConfigLoadError, load_typed

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "hbs.yaml"
RELOAD_ENV = "HBS_TEMPLATE_RELOAD"

_yaml = YAML(typ="safe")


def _read_yaml(path: Path) -> Any:
    try:
        return _yaml.load(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigLoadError(f"{path}: invalid YAML: {e}") from e


def _read_yaml_map(path: Path) -> dict:
    """Read a YAML file that must hold a mapping; a missing file is empty."""
    if not path.is_file():
        return {}
    raw = _read_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"YAML must be a mapping: {path}")
    return raw


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """
    Load engine settings.

    `path` may point at a YAML file or a directory holding `hbs.yaml`; when
    nothing is found the defaults apply. A relative `templates.base_dir` is
    taken relative to the config file. `HBS_TEMPLATE_RELOAD` overrides
    `cache.reload`.
    """
    path = Path(path) if path is not None else Path.cwd()
    if path.is_dir():
        path = path / CONFIG_FILENAME

    cfg: EngineConfig = load_typed(EngineConfig, _read_yaml_map(path), path=path.name)
    if path.is_file():
        logger.debug("Loaded config from %s", path)
        base = Path(cfg.templates.base_dir)
        if not base.is_absolute():
            cfg.templates.base_dir = str((path.parent / base).resolve())

    env = os.environ.get(RELOAD_ENV)
    if env is not None:
        cfg.cache.reload = env.strip().lower() not in {"0", "false", "no", "off", ""}

    return cfg


def load_data(path: Path) -> Any:
    """Read a render model from a YAML (or JSON) file."""
    if not path.is_file():
        raise ConfigLoadError(f"Data file not found: {path}")
    return _read_yaml(path)


__all__ = ["load_config", "load_data", "CONFIG_FILENAME", "RELOAD_ENV"]
