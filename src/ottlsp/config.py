"""
Configuration for ottlsp.

The only setting that affects checking is the list of extra flags passed to
``ott``.  It can come from three places, later ones replacing earlier ones
wholesale:

1. A ``.ottlsp.toml`` project config file in the workspace root
   (``ott_flags = ["-merge", "true"]``).
2. ``initializationOptions`` sent with ``initialize``.
3. ``workspace/didChangeConfiguration`` notifications.

Client settings may be flat (``{"ottFlags": [...]}``) or nested under an
``ott`` section (``{"ott": {"flags": [...]}}``).
"""
from __future__ import annotations

import logging
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = '.ottlsp.toml'

_FLAG_KEYS = ('ottFlags', 'ott_flags')
_SECTION_FLAG_KEYS = ('flags',) + _FLAG_KEYS


@dataclass(frozen=True)
class OttConfig:
    ott_flags: tuple[str, ...] = ()


def _section(settings: Any) -> dict | None:
    if not isinstance(settings, dict):
        return None
    ott = settings.get('ott')
    return ott if isinstance(ott, dict) else settings


def _flags_from_value(value: Any) -> tuple[str, ...] | None:
    if not isinstance(value, (list, tuple)):
        return None
    if not all(isinstance(v, str) for v in value):
        return None
    return tuple(value)


def config_from_settings(settings: Any) -> OttConfig | None:
    """Build an :class:`OttConfig` from client *settings*, or None if unusable.

    A settings object without any flag key is a valid, empty configuration.
    A flag key holding anything but a list of strings makes the whole payload
    invalid.
    """
    section = _section(settings)
    if section is None:
        return None
    keys = _SECTION_FLAG_KEYS if section is not settings else _FLAG_KEYS
    for key in keys:
        if key in section:
            flags = _flags_from_value(section[key])
            return OttConfig(ott_flags=flags) if flags is not None else None
    return OttConfig()


def log_level_from_settings(settings: Any) -> str | None:
    """Return the ``logLevel`` string from *settings* if one is present."""
    section = _section(settings)
    if section is None:
        return None
    raw = section.get('logLevel')
    return raw if isinstance(raw, str) else None


def read_project_config(workspace_root: str | None) -> OttConfig | None:
    """Parse ``.ottlsp.toml`` in *workspace_root* and return its config, or None."""
    if not workspace_root:
        return None
    config_path = Path(workspace_root) / PROJECT_CONFIG_NAME
    if not config_path.is_file():
        return None
    try:
        data = tomllib.loads(config_path.read_text(encoding='utf-8'))
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning('read_project_config: ignoring %s: %s', config_path, e)
        return None
    flags = _flags_from_value(data.get('ott_flags', []))
    if flags is None:
        logger.warning('read_project_config: ott_flags in %s must be a list of strings',
                       config_path)
        return None
    return OttConfig(ott_flags=flags)


class ConfigStore:
    """Holds the current :class:`OttConfig`.

    Readers get an immutable snapshot, so a check already in progress keeps
    the flags it started with even if the configuration is replaced.
    """

    def __init__(self, config: OttConfig | None = None):
        self._lock = threading.Lock()
        self._config = config or OttConfig()

    def get(self) -> OttConfig:
        with self._lock:
            return self._config

    def replace(self, config: OttConfig) -> None:
        with self._lock:
            self._config = config
        logger.info('ott flags set to %s', list(config.ott_flags))
