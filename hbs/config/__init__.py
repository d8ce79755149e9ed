from .load import CONFIG_FILENAME, load_config, load_data
from .model import CacheCfg, DelimitersCfg, EngineConfig, TemplatesCfg
from .typed import ConfigLoadError, load_typed

__all__ = [
    "EngineConfig",
    "DelimitersCfg",
    "CacheCfg",
    "TemplatesCfg",
    "load_config",
    "load_data",
    "load_typed",
    "ConfigLoadError",
    "CONFIG_FILENAME",
]
