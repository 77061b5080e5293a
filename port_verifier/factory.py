"""Factory helpers for constructing the oracle client from configuration."""
from __future__ import annotations

import importlib
from typing import Any, Mapping

from .config import DEFAULT_ORACLE_CLASS, ConfigurationError
from .rate_limit import DelayPolicy, RateLimitedOracle, RateLimiter


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid oracle class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Oracle module '{module_name}' could not be imported") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def build_oracle(config: Mapping[str, Any]) -> RateLimitedOracle:
    """Instantiate the oracle class named in the ``oracle`` configuration section."""

    oracle_cfg = config.get("oracle") or {}
    class_path = oracle_cfg.get("class") or DEFAULT_ORACLE_CLASS
    options = oracle_cfg.get("options") or {}
    if not isinstance(options, Mapping):
        raise ConfigurationError("Oracle 'options' must be a mapping")

    oracle_cls = _load_class(class_path)
    oracle_instance = oracle_cls(**options)

    delay_seconds = float(oracle_cfg.get("delay_seconds", 0) or 0)
    calls_per_minute = oracle_cfg.get("rate_limit_per_minute")
    rate_limiter = RateLimiter(float(calls_per_minute)) if calls_per_minute else RateLimiter(None)

    return RateLimitedOracle(
        oracle_instance,
        display_name=oracle_cfg.get("name"),
        delay_policy=DelayPolicy(delay_seconds=delay_seconds),
        rate_limiter=rate_limiter,
    )
