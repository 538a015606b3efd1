"""Configuration: YAML file -> validated, immutable LogConfig."""

import enum
import logging
import math
import os
from dataclasses import dataclass

import yaml

from mlog.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.mlog"
CONFIG_ENV_VAR = "MLOG_CONFIG"
DEFAULT_MAX_FILES = 5

_SIZE_UNITS = {"K": 1024, "M": 1024 ** 2, "G": 1024 ** 3}
_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class LogMode(enum.Enum):
    TEE = "tee"
    REDIRECT = "redirect"


def parse_size(value) -> int:
    """Parse ``1024``, ``"10K"``, ``"25M"`` or ``"1G"`` into a byte count."""
    if isinstance(value, bool):
        raise ConfigError(f"unknown file.size {value!r}")
    if isinstance(value, int):
        size = value
    else:
        text = str(value).strip()
        if not text:
            raise ConfigError("empty file.size")
        unit = text[-1].upper()
        try:
            if unit in _SIZE_UNITS:
                size = int(text[:-1]) * _SIZE_UNITS[unit]
            else:
                size = int(text)
        except ValueError:
            raise ConfigError(f"unknown file.size {value!r}") from None
    if size < 0:
        raise ConfigError(f"file.size can not be negative: {value!r}")
    return size


def parse_duration(value) -> int:
    """Parse ``3600``, ``"30s"``, ``"5m"``, ``"1.5h"`` or ``"7d"`` into seconds."""
    if isinstance(value, bool):
        raise ConfigError(f"unknown file.time {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ConfigError(f"unknown file.time {value!r}")
        seconds = int(value)
    else:
        text = str(value).strip()
        if not text:
            raise ConfigError("empty file.time")
        unit = text[-1].lower()
        try:
            if unit in _DURATION_UNITS:
                seconds = int(float(text[:-1]) * _DURATION_UNITS[unit])
            else:
                seconds = int(text)
        except (ValueError, OverflowError):
            raise ConfigError(f"unknown file.time {value!r}") from None
    if seconds < 0:
        raise ConfigError(f"file.time can not be negative: {value!r}")
    return seconds


@dataclass(frozen=True)
class RotationConfig:
    path: str
    mode: LogMode = LogMode.REDIRECT
    max_files: int = DEFAULT_MAX_FILES
    max_age: int = 0   # seconds, 0 means no limit
    max_size: int = 0  # bytes, 0 means no limit

    def __post_init__(self):
        if not self.path:
            raise ConfigError("file.name can not be empty")
        if self.max_files < 1:
            raise ConfigError(f"file.num must be at least 1, got {self.max_files}")
        if self.max_age < 0:
            raise ConfigError(f"file.time can not be negative, got {self.max_age}")
        if self.max_size < 0:
            raise ConfigError(f"file.size can not be negative, got {self.max_size}")

    @classmethod
    def from_dict(cls, d: dict, section: str = "stream") -> "RotationConfig":
        if not isinstance(d, dict):
            raise ConfigError(f"[{section}] must be a mapping")
        if d.get("target") != "file":
            raise ConfigError(f'[{section}] no target found, should be `target: file`')

        file_cfg = d.get("file")
        if not isinstance(file_cfg, dict) or not file_cfg.get("name"):
            raise ConfigError(f"[{section}] no file configured, need file.name")

        raw_mode = d.get("mode", LogMode.REDIRECT.value)
        try:
            mode = LogMode(str(raw_mode).lower())
        except ValueError:
            raise ConfigError(f"[{section}] unknown mode {raw_mode!r}") from None

        num = file_cfg.get("num", DEFAULT_MAX_FILES)
        if isinstance(num, bool) or not isinstance(num, int):
            raise ConfigError(f"[{section}] file.num must be an integer, got {num!r}")

        return cls(
            path=os.path.expanduser(str(file_cfg["name"])),
            mode=mode,
            max_files=num,
            max_age=parse_duration(file_cfg["time"]) if "time" in file_cfg else 0,
            max_size=parse_size(file_cfg["size"]) if "size" in file_cfg else 0,
        )


@dataclass(frozen=True)
class LogConfig:
    mlog: RotationConfig | None = None
    stdout: RotationConfig | None = None
    stderr: RotationConfig | None = None

    @classmethod
    def from_dict(cls, d: dict | None) -> "LogConfig":
        d = d or {}
        if not isinstance(d, dict):
            raise ConfigError("config file must contain a mapping at top level")
        sections = {}
        for name in ("mlog", "stdout", "stderr"):
            if d.get(name) is not None:
                sections[name] = RotationConfig.from_dict(d[name], section=name)
        return cls(**sections)


def resolve_config_path(path: str | None = None) -> tuple[str, bool]:
    """Return (path, explicit). Explicit paths must exist; the default may not."""
    if path:
        return os.path.expanduser(path), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return os.path.expanduser(env_path), True
    return os.path.expanduser(DEFAULT_CONFIG_PATH), False


def load_yaml(path: str) -> dict:
    """Load YAML config from *path* and return it as a dict."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"failed to read {path}: {e}") from e
    return data or {}


def load_config(path: str | None = None) -> LogConfig:
    """Build the LogConfig from the config file, falling back to passthrough."""
    resolved, explicit = resolve_config_path(path)
    if not explicit and not os.path.exists(resolved):
        logger.info("No config at %s, passing output through", resolved)
        return LogConfig()
    config = LogConfig.from_dict(load_yaml(resolved))
    logger.info("Loaded config from %s", resolved)
    return config
