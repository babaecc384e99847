"""
Configuration for the text monitor.

Values are layered: dataclass defaults, then an optional YAML file, then
environment variables, then explicit overrides (usually from the CLI).
"""

import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import yaml

from .tracking import DEFAULT_WINDOW_SIZE, DEFAULT_STABLE_THRESHOLD, validate_window
from .flush import DEFAULT_FLUSH_INTERVAL
from .notify import DEFAULT_TIMEOUT, DEFAULT_MAX_RETRIES

ENV_SINK_URL = "TEMPORAL_TEXT_SINK_URL"
ENV_FLUSH_INTERVAL = "TEMPORAL_TEXT_FLUSH_INTERVAL"

DEFAULT_MARKER = "?"


# =============================================================================
# Interesting-text predicates
# =============================================================================

def contains_marker(marker: str = DEFAULT_MARKER) -> Callable[[str], bool]:
    """Predicate: text contains ``marker``."""
    def predicate(text: str) -> bool:
        return marker in text
    return predicate


def matches_pattern(pattern: str) -> Callable[[str], bool]:
    """Predicate: ``pattern`` matches somewhere in the text."""
    compiled = re.compile(pattern)

    def predicate(text: str) -> bool:
        return compiled.search(text) is not None
    return predicate


# =============================================================================
# Config
# =============================================================================

def _check_number(name: str, value: Any, integer: bool = False) -> None:
    """Raise ValueError unless ``value`` is an int (or float when allowed)."""
    allowed = (int,) if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, allowed):
        kind = "an integer" if integer else "a number"
        raise ValueError(f"{name} must be {kind}, got {value!r}")


@dataclass
class MonitorConfig:
    """Tunable parameters for tracking, ranking and delivery."""
    window_size: int = DEFAULT_WINDOW_SIZE
    stable_threshold: int = DEFAULT_STABLE_THRESHOLD
    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    interesting_marker: str = DEFAULT_MARKER
    interesting_pattern: Optional[str] = None
    sink_endpoint: Optional[str] = None
    sink_timeout: float = DEFAULT_TIMEOUT
    sink_max_retries: int = DEFAULT_MAX_RETRIES
    dispatch_workers: int = 2

    def validate(self) -> "MonitorConfig":
        """Raise ValueError on unusable values; returns self for chaining."""
        validate_window(self.window_size, self.stable_threshold)

        _check_number("flush_interval", self.flush_interval)
        _check_number("sink_timeout", self.sink_timeout)
        _check_number("sink_max_retries", self.sink_max_retries, integer=True)
        _check_number("dispatch_workers", self.dispatch_workers, integer=True)

        for name in ("interesting_marker", "interesting_pattern", "sink_endpoint"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {value!r}")

        if self.flush_interval <= 0:
            raise ValueError(f"flush_interval must be positive, got {self.flush_interval}")
        if self.sink_timeout <= 0:
            raise ValueError(f"sink_timeout must be positive, got {self.sink_timeout}")
        if self.sink_max_retries < 0:
            raise ValueError(f"sink_max_retries cannot be negative, got {self.sink_max_retries}")
        if self.dispatch_workers < 1:
            raise ValueError(f"dispatch_workers must be >= 1, got {self.dispatch_workers}")

        if self.interesting_pattern is not None:
            try:
                re.compile(self.interesting_pattern)
            except re.error as e:
                raise ValueError(f"Invalid interesting_pattern: {e}") from e
        elif not self.interesting_marker:
            raise ValueError("Either interesting_marker or interesting_pattern must be set")

        return self

    def build_predicate(self) -> Callable[[str], bool]:
        if self.interesting_pattern is not None:
            return matches_pattern(self.interesting_pattern)
        return contains_marker(self.interesting_marker)

    def with_overrides(self, **overrides: Any) -> "MonitorConfig":
        """Copy with the non-None overrides applied."""
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _from_env(environ: Dict[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    url = environ.get(ENV_SINK_URL)
    if url:
        values["sink_endpoint"] = url

    interval = environ.get(ENV_FLUSH_INTERVAL)
    if interval:
        try:
            values["flush_interval"] = float(interval)
        except ValueError as e:
            raise ValueError(f"{ENV_FLUSH_INTERVAL} must be a number, got {interval!r}") from e

    return values


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
    **overrides: Any
) -> MonitorConfig:
    """
    Build a validated MonitorConfig.

    Args:
        config_path: Optional YAML file with MonitorConfig keys
        environ: Environment mapping (defaults to os.environ)
        **overrides: Highest-precedence values; None entries are ignored

    Returns:
        Validated MonitorConfig
    """
    config = MonitorConfig()

    if config_path:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{config_path}: expected a mapping at top level")
        config = config.with_overrides(**data)

    config = config.with_overrides(**_from_env(os.environ if environ is None else environ))
    config = config.with_overrides(**overrides)

    return config.validate()
