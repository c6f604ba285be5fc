"""Typed access to ITO_* environment variables.

Variables are looked up by their name without the prefix, so
``reader.get_int("CONCURRENCY")`` reads ``ITO_CONCURRENCY``. Invalid values
are logged and replaced by the default instead of failing the whole
configuration.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Collection, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

ENV_PREFIX = "ITO_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})

T = TypeVar("T")


class EnvReader:
    """Read and convert prefixed environment variables.

    Example:
        reader = EnvReader({"ITO_CONCURRENCY": "4"})
        reader.get_int("CONCURRENCY")  # 4
    """

    def __init__(
        self, env: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX
    ) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ
        self.prefix = prefix

    def name(self, key: str) -> str:
        """Full variable name for a key."""
        return f"{self.prefix}{key}"

    def _convert(
        self, key: str, convert: Callable[[str], T], default: T | None
    ) -> T | None:
        raw = self._env.get(self.name(key))
        if raw is None:
            return default
        try:
            return convert(raw.strip())
        except ValueError as e:
            logger.warning("Ignoring %s=%r: %s", self.name(key), raw, e)
            return default

    def get_str(self, key: str, default: str | None = None) -> str | None:
        return self._convert(key, str, default)

    def get_int(self, key: str, default: int | None = None) -> int | None:
        return self._convert(key, int, default)

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """Parse 1/true/yes/on and 0/false/no/off, case-insensitively."""

        def parse(value: str) -> bool:
            folded = value.casefold()
            if folded in _TRUE:
                return True
            if folded in _FALSE:
                return False
            raise ValueError("expected a boolean")

        return self._convert(key, parse, default)

    def get_choice(
        self, key: str, choices: Collection[str], default: str | None = None
    ) -> str | None:
        """Read a value restricted to a fixed set, compared case-insensitively."""

        def parse(value: str) -> str:
            folded = value.casefold()
            if folded not in choices:
                raise ValueError(f"expected one of {', '.join(sorted(choices))}")
            return folded

        return self._convert(key, parse, default)

    def get_path(
        self, key: str, *, must_exist: bool = True, default: Path | None = None
    ) -> Path | None:
        """Read a path, user-expanded.

        With must_exist, a path that does not exist is reported and the
        default is returned.
        """

        def parse(value: str) -> Path:
            path = Path(value).expanduser()
            if must_exist and not path.exists():
                raise ValueError("path does not exist")
            return path

        return self._convert(key, parse, default)
