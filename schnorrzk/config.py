"""Configuration for the Schnorr proof engine.

Uses Pydantic BaseSettings with environment variable loading and validation.
Group parameters are read as decimal or ``0x``-prefixed hexadecimal strings so
arbitrarily large values round-trip without precision loss.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigurationError
from .group import DEFAULT_PRIMALITY_ROUNDS, RFC3526_GROUP_14, GroupParameters

_DEFAULT_P, _DEFAULT_Q, _DEFAULT_G = RFC3526_GROUP_14


class Settings(BaseSettings):
    """Engine settings loaded from ``SCHNORR_*`` environment variables."""

    model_config = {"env_prefix": "SCHNORR_", "case_sensitive": False, "extra": "ignore"}

    # Group
    p: str = Field(default=hex(_DEFAULT_P), description="Field modulus p")
    q: str = Field(default=hex(_DEFAULT_Q), description="Subgroup order q")
    g: str = Field(default=str(_DEFAULT_G), description="Generator of the order-q subgroup")
    primality_rounds: int = Field(
        default=DEFAULT_PRIMALITY_ROUNDS,
        ge=16,
        description="Miller-Rabin rounds; false-positive rate is at most 4^-rounds",
    )

    # Protocol
    allow_secret_normalization: bool = Field(
        default=False,
        description="Reduce out-of-range secrets modulo q instead of rejecting them",
    )
    rounds: int = Field(default=1, ge=1, le=256, description="Interactive rounds per identification")

    # Verifier service
    session_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Seconds a pending interactive session waits for its response",
    )
    max_pending_sessions: int = Field(
        default=10_000,
        ge=1,
        description="Pending sessions kept before the oldest is evicted",
    )

    # Logging
    log_format: str = Field(default="text", description="Log format: text or json")
    log_level: str = Field(default="INFO", description="Python log level")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("text", "json"):
            msg = f"SCHNORR_LOG_FORMAT must be 'text' or 'json', got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(getattr(logging, v, None), int):
            msg = f"SCHNORR_LOG_LEVEL must be a valid Python log level, got '{v}'"
            raise ValueError(msg)
        return v


def parse_integer(name: str, raw: str) -> int:
    """Parse a decimal or ``0x`` hexadecimal parameter string."""

    text = raw.strip().replace("_", "")
    try:
        if text.lower().startswith("0x"):
            return int(text[2:], 16)
        return int(text, 10)
    except ValueError as exc:
        raise ConfigurationError(f"Parameter '{name}' is not a decimal or 0x-hex integer") from exc


def load_group_parameters(settings: Settings | None = None) -> GroupParameters:
    """Parse and validate the configured ``(p, q, g)`` triple."""

    settings = settings or get_settings()
    return GroupParameters.validate(
        parse_integer("p", settings.p),
        parse_integer("q", settings.q),
        parse_integer("g", settings.g),
        rounds=settings.primality_rounds,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings", "load_group_parameters", "parse_integer"]
