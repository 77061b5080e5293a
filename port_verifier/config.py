"""Configuration helpers for the port verification orchestrator."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_ORACLE_CLASS = "port_verifier.oracle.gemini.GeminiOracle"
DEFAULT_BATCH_SIZE = 5

_ENV_CREDENTIAL = ("PORT_VERIFIER_API_KEY", "GEMINI_API_KEY")
_ENV_ENDPOINT = "PORT_VERIFIER_BASE_URL"
_ENV_MODEL = "PORT_VERIFIER_MODEL"


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


@dataclass(frozen=True)
class OracleConfig:
    """Connection settings passed explicitly into every oracle call."""

    credential: Optional[str] = None
    endpoint_override: Optional[str] = None
    model: str = DEFAULT_MODEL
    language: str = "Chinese"
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class OrchestratorSettings:
    """Tunables for the batch orchestrator."""

    batch_size: int = DEFAULT_BATCH_SIZE
    mark_unmatched_failed: bool = True
    stale_after_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be at least 1, got {self.batch_size}")


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return section


def _first_env(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


def build_oracle_config(
    config: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> OracleConfig:
    """Resolve oracle settings from the ``oracle`` section and the environment.

    Values present in the configuration file win over environment variables.
    """

    environ = os.environ if environ is None else environ
    section = _section(config, "oracle")

    credential = section.get("credential") or _first_env(environ, *_ENV_CREDENTIAL)
    endpoint = section.get("endpoint_override") or _first_env(environ, _ENV_ENDPOINT)
    model = section.get("model") or _first_env(environ, _ENV_MODEL) or DEFAULT_MODEL
    timeout = section.get("timeout_seconds")

    if not credential:
        LOGGER.debug("No oracle credential configured; the client default will be used")

    return OracleConfig(
        credential=credential,
        endpoint_override=endpoint,
        model=str(model),
        language=str(section.get("language") or "Chinese"),
        timeout_seconds=float(timeout) if timeout else None,
    )


def build_orchestrator_settings(config: Mapping[str, Any]) -> OrchestratorSettings:
    section = _section(config, "orchestrator")
    stale_after = section.get("stale_after_seconds")
    try:
        return OrchestratorSettings(
            batch_size=int(section.get("batch_size", DEFAULT_BATCH_SIZE)),
            mark_unmatched_failed=bool(section.get("mark_unmatched_failed", True)),
            stale_after_seconds=float(stale_after) if stale_after else None,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid orchestrator configuration: {exc}") from exc
