"""
core/config.py — Typed configuration loader for DotDecoder.

Loads config/dotdecoder.yaml and validates all values into typed dataclasses.
All downstream modules import from this module; never read YAML directly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from core.constants import C

logger = logging.getLogger(__name__)

_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARN", "WARNING", "ERROR"})


# ──────────────────────────────────────────────
# Dataclass hierarchy — mirrors dotdecoder.yaml
# ──────────────────────────────────────────────


@dataclass(frozen=True)
class GestureConfig:
    """Pointer / touch fusion tuning."""

    mouse_lockout_ms: float = C.MOUSE_LOCKOUT_MS


@dataclass(frozen=True)
class DictionaryConfig:
    """Where the wordlist comes from. ``path=None`` → bundled BIP-39 English."""

    path: Optional[str] = None

    @property
    def resolved_path(self) -> Optional[Path]:
        """Return the wordlist path with ``~`` expanded, or None."""
        if self.path is None:
            return None
        return Path(os.path.expanduser(self.path))


@dataclass(frozen=True)
class GuardConfig:
    """Exposure guard policy."""

    require_offline: bool = True


@dataclass(frozen=True)
class WebConfig:
    """Web interaction surface bind address."""

    host: str = "127.0.0.1"
    port: int = 7860


@dataclass(frozen=True)
class LoggingConfig:
    """stderr log level for stdlib logging."""

    level: str = "INFO"


@dataclass(frozen=True)
class DecoderConfig:
    """Root configuration object — single source of truth for all settings."""

    gesture: GestureConfig = field(default_factory=GestureConfig)
    dictionary: DictionaryConfig = field(default_factory=DictionaryConfig)
    guard: GuardConfig = field(default_factory=GuardConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ──────────────────────────────────────────────
# Loader
# ──────────────────────────────────────────────


def load_config(config_path: Path | str | None = None) -> DecoderConfig:
    """
    Load, validate, and return a DecoderConfig from a YAML file.

    The search order for the config file is:
    1. *config_path* argument (if provided)
    2. DOTDECODER_CONFIG environment variable
    3. ``config/dotdecoder.yaml`` relative to the project root
    4. Built-in defaults (no file required)

    Args:
        config_path: Optional path to a ``dotdecoder.yaml`` file.

    Returns:
        A fully populated and frozen :class:`DecoderConfig` instance.

    Raises:
        ValueError: If a YAML field has an invalid type or value.
        FileNotFoundError: If *config_path* is explicitly given but does not exist.
    """
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = Path(config_path)
        if not resolved_path.exists():
            raise FileNotFoundError(f"Config file not found: {resolved_path}")
    elif "DOTDECODER_CONFIG" in os.environ:
        resolved_path = Path(os.environ["DOTDECODER_CONFIG"])
        if not resolved_path.exists():
            raise FileNotFoundError(
                f"DOTDECODER_CONFIG points to missing file: {resolved_path}"
            )
    else:
        candidate = Path(__file__).resolve().parent.parent / "config" / "dotdecoder.yaml"
        if candidate.exists():
            resolved_path = candidate

    raw: dict = {}
    if resolved_path is not None:
        logger.info("Loading config from: %s", resolved_path)
        with resolved_path.open("r", encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file must be a YAML mapping, got: {type(loaded)}")
        raw = loaded
    else:
        logger.info("No config file found — using built-in defaults")

    try:
        config = DecoderConfig(
            gesture=GestureConfig(**(raw.get("gesture") or {})),
            dictionary=DictionaryConfig(**(raw.get("dictionary") or {})),
            guard=GuardConfig(**(raw.get("guard") or {})),
            web=WebConfig(**(raw.get("web") or {})),
            logging=LoggingConfig(**(raw.get("logging") or {})),
        )
    except TypeError as exc:
        raise ValueError(f"Invalid config value: {exc}") from exc

    _validate_config(config)
    logger.debug("Config loaded: %s", config)
    return config


def _validate_config(config: DecoderConfig) -> None:
    """
    Validate value ranges on the loaded configuration.

    Raises:
        ValueError: If any configured value violates a hard constraint.
    """
    lockout = config.gesture.mouse_lockout_ms
    if isinstance(lockout, bool) or not isinstance(lockout, (int, float)) or lockout < 0:
        raise ValueError(
            f"gesture.mouse_lockout_ms must be a number ≥ 0, got {lockout!r}"
        )
    port = config.web.port
    if isinstance(port, bool) or not isinstance(port, int) or not (1 <= port <= 65535):
        raise ValueError(f"web.port must be in [1, 65535], got {port!r}")
    if not isinstance(config.guard.require_offline, bool):
        raise ValueError(
            f"guard.require_offline must be a boolean, got {config.guard.require_offline!r}"
        )
    if str(config.logging.level).upper() not in _LOG_LEVELS:
        raise ValueError(
            f"logging.level must be one of {sorted(_LOG_LEVELS)}, got {config.logging.level!r}"
        )
