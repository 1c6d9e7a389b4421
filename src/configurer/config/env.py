"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Final

from .errors import ConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

ENV_PREFIX: Final[str] = "CONFIGURER_"

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def env_str(setting: str, default: str) -> str:
    """Return ``CONFIGURER_<SETTING>`` or ``default`` when unset.

    An explicitly empty value is preserved; hook commands use it to disable themselves.
    """

    value = os.getenv(ENV_PREFIX + setting.upper())
    return default if value is None else value.strip()


def env_flag(setting: str, default: bool) -> bool:
    value = os.getenv(ENV_PREFIX + setting.upper())
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {setting}: {value!r}")


def env_float(setting: str, default: float) -> float:
    value = os.getenv(ENV_PREFIX + setting.upper())
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid number for {setting}: {value!r}") from exc


def env_choice(setting: str, default: str, choices: Sequence[str]) -> str:
    value = env_str(setting, default) or default
    if value not in choices:
        allowed = ", ".join(choices)
        raise ConfigurationError(f"Invalid value for {setting}: {value!r} (expected {allowed})")
    return value


def env_int(setting: str, default: int) -> int:
    value = os.getenv(ENV_PREFIX + setting.upper())
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer for {setting}: {value!r}") from exc
