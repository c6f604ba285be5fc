"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (ITO_*)
3. Config file (~/.ito/config.toml)
4. Default values

Environment variables:
- ITO_CONFIG_PATH: Path to config file (overrides default location)
- ITO_DATA_DIR: Path to ito data directory (overrides ~/.ito/)
- ITO_PNGQUANT_PATH, ITO_MOZJPEG_PATH, ITO_CWEBP_PATH: Compressor paths
- ITO_CONCURRENCY: Engine worker threads
- ITO_STRIP_METADATA, ITO_USE_MOZJPEG: Processing defaults
- ITO_COMPRESS_TIMEOUT: Compressor timeout in seconds
- ITO_LOG_LEVEL, ITO_LOG_FILE, ITO_LOG_FORMAT: Logging overrides
"""

from __future__ import annotations

import logging
import threading
import tomllib
from pathlib import Path
from typing import Any

from ito.config.env import EnvReader
from ito.config.models import (
    LOG_FORMATS,
    LOG_LEVELS,
    EngineConfig,
    ItoConfig,
    LoggingConfig,
    ProcessingConfig,
    ToolPathsConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".ito"
CONFIG_FILE_NAME = "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


def get_data_dir(env: EnvReader | None = None) -> Path:
    """Get the ito data directory.

    Can be overridden by ITO_DATA_DIR environment variable.

    Returns:
        Path to the data directory (~/.ito/ by default).
    """
    env = env or EnvReader()
    return env.get_path("DATA_DIR", must_exist=False) or DEFAULT_CONFIG_DIR


def get_default_config_path(env: EnvReader | None = None) -> Path:
    """Get the default config file path.

    Can be overridden by ITO_CONFIG_PATH environment variable.
    """
    env = env or EnvReader()
    configured = env.get_path("CONFIG_PATH", must_exist=False)
    return configured or get_data_dir(env) / CONFIG_FILE_NAME


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise on parse failures instead of returning {}.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        tomllib.TOMLDecodeError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        return {}

    with _config_cache_lock:
        if path in _config_cache:
            cached_config, cached_mtime = _config_cache[path]
            if current_mtime == cached_mtime:
                return cached_config

        try:
            with path.open("rb") as f:
                result = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            if strict:
                raise
            logger.warning("Could not parse config file %s: %s", path, e)
            result = {}

        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _optional_path(value: Any) -> Path | None:
    if value in (None, ""):
        return None
    return Path(str(value)).expanduser()


def get_config(
    config_path: Path | None = None,
    env: EnvReader | None = None,
) -> ItoConfig:
    """Build the effective configuration.

    Environment values win over the config file, which wins over the
    dataclass defaults.

    Raises:
        ValueError: If a resulting value fails validation.
    """
    env = env or EnvReader()
    file_config = load_config_file(config_path or get_default_config_path(env))

    tools_file = file_config.get("tools", {})
    engine_file = file_config.get("engine", {})
    processing_file = file_config.get("processing", {})
    logging_file = file_config.get("logging", {})

    tools = ToolPathsConfig(
        **{
            name: env.get_path(f"{name.upper()}_PATH")
            or _optional_path(tools_file.get(name))
            for name in ("pngquant", "mozjpeg", "cwebp")
        }
    )

    engine = EngineConfig(
        concurrency=env.get_int("CONCURRENCY", engine_file.get("concurrency")),
    )

    defaults = ProcessingConfig()
    processing = ProcessingConfig(
        strip_metadata=env.get_bool(
            "STRIP_METADATA",
            processing_file.get("strip_metadata", defaults.strip_metadata),
        ),
        use_mozjpeg=env.get_bool(
            "USE_MOZJPEG", processing_file.get("use_mozjpeg", defaults.use_mozjpeg)
        ),
        compress_timeout=env.get_int(
            "COMPRESS_TIMEOUT",
            processing_file.get("compress_timeout", defaults.compress_timeout),
        ),
    )

    log_defaults = LoggingConfig()
    logging_config = LoggingConfig(
        level=env.get_choice(
            "LOG_LEVEL", LOG_LEVELS, logging_file.get("level", log_defaults.level)
        ),
        file=env.get_path("LOG_FILE", must_exist=False)
        or _optional_path(logging_file.get("file")),
        format=env.get_choice(
            "LOG_FORMAT",
            LOG_FORMATS,
            logging_file.get("format", log_defaults.format),
        ),
        include_stderr=logging_file.get("include_stderr", log_defaults.include_stderr),
        max_bytes=logging_file.get("max_bytes", log_defaults.max_bytes),
        backup_count=logging_file.get("backup_count", log_defaults.backup_count),
    )

    return ItoConfig(
        tools=tools,
        engine=engine,
        processing=processing,
        logging=logging_config,
    )
