"""Load and merge configuration from .gitlink.toml and GITLINK_* env vars."""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gitlink.config.schema import (
    FINGERPRINT_MODES,
    HISTORY_STRATEGIES,
    MERGE_POLICIES,
    OUTPUT_FORMATS,
    OVERLAP_POLICIES,
    EntropyConfig,
    FingerprintConfig,
    GitLinkConfig,
    HistoryConfig,
    OutputConfig,
    PatternsConfig,
    ScanConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".gitlink.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _check_choice(value: str, choices: tuple, key: str) -> None:
    if value not in choices:
        raise ConfigError(
            f"Invalid value for {key}: {value!r} (expected one of: {', '.join(choices)})"
        )


def _check_int(value: Any, key: str, minimum: int) -> None:
    # bool is an int subclass; `true` is not a size
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {value}")


def _check_number(value: Any, key: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number, got {value!r}")


def _check_bool(value: Any, key: str) -> None:
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be true or false, got {value!r}")


def _check_names(value: Any, key: str) -> None:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of pattern ids")


def validate(cfg: GitLinkConfig) -> None:
    """Reject values of the wrong type and values the scanner cannot honour."""
    _check_choice(cfg.scan.overlap, OVERLAP_POLICIES, "scan.overlap")
    _check_choice(cfg.history.strategy, HISTORY_STRATEGIES, "history.strategy")
    _check_choice(cfg.history.merges, MERGE_POLICIES, "history.merges")
    _check_choice(cfg.fingerprint.mode, FINGERPRINT_MODES, "fingerprint.mode")
    _check_choice(cfg.output.format, OUTPUT_FORMATS, "output.format")
    _check_int(cfg.scan.max_file_size, "scan.max_file_size", 1)
    _check_int(cfg.scan.workers, "scan.workers", 0)
    _check_bool(cfg.entropy.enabled, "entropy.enabled")
    _check_number(cfg.entropy.min_entropy, "entropy.min_entropy")
    _check_int(cfg.entropy.min_length, "entropy.min_length", 1)
    _check_names(cfg.patterns.enable, "patterns.enable")
    _check_names(cfg.patterns.disable, "patterns.disable")
    _check_bool(cfg.history.enabled, "history.enabled")
    if cfg.history.since_days is not None:
        _check_int(cfg.history.since_days, "history.since_days", 0)
    _check_bool(cfg.output.show_summary, "output.show_summary")


def _merge_env_overrides(cfg: GitLinkConfig) -> None:
    """Apply GITLINK_* environment variable overrides."""
    if val := os.environ.get("GITLINK_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("GITLINK_DISABLE_PATTERNS"):
        cfg.patterns.disable.extend(p.strip() for p in val.split(",") if p.strip())
    if val := os.environ.get("GITLINK_SINCE_DAYS"):
        try:
            days = int(val)
        except ValueError:
            logger.warning("Ignoring non-integer GITLINK_SINCE_DAYS=%r", val)
        else:
            if days >= 0:
                cfg.history.since_days = days
    if val := os.environ.get("GITLINK_WORKERS"):
        try:
            workers = int(val)
        except ValueError:
            logger.warning("Ignoring non-integer GITLINK_WORKERS=%r", val)
        else:
            if workers >= 0:
                cfg.scan.workers = workers


def load_config(
    root: Path,
    config_override: Optional[str] = None,
) -> GitLinkConfig:
    """Load, validate, and return a GitLinkConfig."""
    config_path = find_config_file(root, config_override)

    if config_path is None:
        cfg = GitLinkConfig()
    else:
        logger.debug("Loading config from %s", config_path)
        raw = _parse_toml(config_path)
        try:
            cfg = GitLinkConfig(
                version=str(raw.get("version", "1.0")),
                scan=_build_section(raw, ScanConfig, "scan"),
                entropy=_build_section(raw, EntropyConfig, "entropy"),
                patterns=_build_section(raw, PatternsConfig, "patterns"),
                history=_build_section(raw, HistoryConfig, "history"),
                fingerprint=_build_section(raw, FingerprintConfig, "fingerprint"),
                output=_build_section(raw, OutputConfig, "output"),
            )
        except TypeError as exc:
            raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc

    validate(cfg)
    _merge_env_overrides(cfg)
    return cfg
