"""Configuration management for ito.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (ITO_*)
3. Config file (~/.ito/config.toml)
4. Default values (lowest priority)
"""

from ito.config.env import EnvReader
from ito.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from ito.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from ito.config.models import (
    EngineConfig,
    ItoConfig,
    LoggingConfig,
    ProcessingConfig,
    ToolPathsConfig,
)

__all__ = [
    "EngineConfig",
    "EnvReader",
    "ItoConfig",
    "LoggingConfig",
    "ProcessingConfig",
    "ToolPathsConfig",
    "build_logging_config",
    "clear_config_cache",
    "configure_logging_from_cli",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
]
