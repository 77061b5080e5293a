"""Clients for the external name verification service."""

from .base import OracleError, OracleProtocol, OracleResponseError, parse_matches  # noqa: F401
from .gemini import GeminiOracle  # noqa: F401
from .sample import StaticOracle  # noqa: F401

__all__ = [
    "GeminiOracle",
    "OracleError",
    "OracleProtocol",
    "OracleResponseError",
    "StaticOracle",
    "parse_matches",
]
