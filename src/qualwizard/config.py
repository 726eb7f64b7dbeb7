"""
Configuration system for qualwizard.

Environment variables are the primary config source, with an optional
JSON/YAML config file for local development.

Usage:
    from qualwizard.config import get_config, Config

    # Load from environment (default)
    config = get_config()

    # Cost model used by the valuator and the solvers
    config.overlap_weight            # -1000 per shared attribute
    config.cross_relation_penalty    # +5 per jump between tables
    config.unresolved_link_value     # cost of a link still waiting on a suggestion

Environment variables:
    QUALWIZARD_ENVIRONMENT=production
    QUALWIZARD_SUGGEST_BASE_URL=http://powa.example.com
    QUALWIZARD_SUGGEST_ENABLED=false
    QUALWIZARD_SOLVER_STRATEGY=insertion
    QUALWIZARD_SOLVER_SEED=42
    QUALWIZARD_CONFIG_FILE=qualwizard.yaml
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from qualwizard.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Environment profiles with different default behaviors."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """Parse environment from string, defaulting to development."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.DEVELOPMENT


class SolverStrategy(str, Enum):
    """Path ordering heuristics available to the wizard."""

    GREEDY = "greedy"
    INSERTION = "insertion"


class Config(BaseModel):
    """
    qualwizard configuration.

    Loaded from environment variables and optional config file.
    """

    model_config = ConfigDict(frozen=True)

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current environment (development/staging/production)",
    )

    # Suggestion side-channel
    suggest_base_url: str = Field(
        default="http://localhost:8888",
        description="Base URL of the server exposing /database/<db>/suggest/",
    )
    suggest_enabled: bool = Field(
        default=True,
        description="Send suggestion requests for links with missing quals",
    )
    suggest_max_workers: int = Field(
        default=4,
        ge=1,
        description="Worker threads used to deliver suggestion requests",
    )
    suggest_timeout_seconds: float | None = Field(
        default=None,
        description="Socket timeout for suggestion requests (None = no timeout)",
    )

    # Cost model
    overlap_weight: float = Field(
        default=1000.0,
        gt=0,
        description="Value of a resolved link is -overlap_weight * len(overlap)",
    )
    cross_relation_penalty: float = Field(
        default=5.0,
        ge=0,
        description="Added to the cost of a link whose nodes are on different tables",
    )
    unresolved_link_value: float = Field(
        default=1000.0,
        description="Cost assumed for a link whose value is still unresolved",
    )

    # Solver
    solver_strategy: SolverStrategy = Field(
        default=SolverStrategy.GREEDY,
        description="Heuristic used to order the tour",
    )
    solver_seed: int | None = Field(
        default=None,
        description="Seed for the randomized insertion solver",
    )

    # Collection
    top_quals: int = Field(
        default=20,
        ge=1,
        description="Number of most-executed quals fetched per load",
    )


def _parse_env_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_env_int(value: str | None, default: int | None) -> int | None:
    """Parse integer from environment variable."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Could not parse integer setting %r, using %s", value, default)
        return default


def _parse_env_float(value: str | None, default: float | None) -> float | None:
    """Parse float from environment variable."""
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Could not parse float setting %r, using %s", value, default)
        return default


def load_config_from_env() -> Config:
    """
    Load configuration from QUALWIZARD_* environment variables.

    Unset variables keep the model defaults.
    """
    env = os.environ
    defaults = Config()

    strategy = env.get("QUALWIZARD_SOLVER_STRATEGY")
    try:
        solver_strategy = (
            SolverStrategy(strategy.lower()) if strategy else defaults.solver_strategy
        )
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown solver strategy: {strategy}",
            config_key="solver_strategy",
        ) from e

    config_kwargs: dict[str, Any] = {
        "environment": Environment.from_string(
            env.get("QUALWIZARD_ENVIRONMENT", "development")
        ),
        "suggest_base_url": env.get(
            "QUALWIZARD_SUGGEST_BASE_URL", defaults.suggest_base_url
        ),
        "suggest_enabled": _parse_env_bool(
            env.get("QUALWIZARD_SUGGEST_ENABLED"), defaults.suggest_enabled
        ),
        "suggest_max_workers": _parse_env_int(
            env.get("QUALWIZARD_SUGGEST_MAX_WORKERS"), defaults.suggest_max_workers
        ),
        "suggest_timeout_seconds": _parse_env_float(
            env.get("QUALWIZARD_SUGGEST_TIMEOUT_SECONDS"),
            defaults.suggest_timeout_seconds,
        ),
        "overlap_weight": _parse_env_float(
            env.get("QUALWIZARD_OVERLAP_WEIGHT"), defaults.overlap_weight
        ),
        "cross_relation_penalty": _parse_env_float(
            env.get("QUALWIZARD_CROSS_RELATION_PENALTY"),
            defaults.cross_relation_penalty,
        ),
        "unresolved_link_value": _parse_env_float(
            env.get("QUALWIZARD_UNRESOLVED_LINK_VALUE"),
            defaults.unresolved_link_value,
        ),
        "solver_strategy": solver_strategy,
        "solver_seed": _parse_env_int(
            env.get("QUALWIZARD_SOLVER_SEED"), defaults.solver_seed
        ),
        "top_quals": _parse_env_int(
            env.get("QUALWIZARD_TOP_QUALS"), defaults.top_quals
        ),
    }

    try:
        return Config(**config_kwargs)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e


def load_config_from_file(path: Path) -> Config:
    """
    Load configuration from a JSON or YAML file.

    Falls back to environment variables when the file does not exist.
    """
    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    with open(path) as f:
        if path.suffix in (".yaml", ".yml"):
            import yaml

            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    try:
        return Config(**(data or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e


@lru_cache(maxsize=1)
def get_config() -> Config:
    """
    Get the global configuration instance.

    Loads from:
    1. QUALWIZARD_CONFIG_FILE environment variable (if set)
    2. Environment variables (default)

    Result is cached for the lifetime of the process.
    """
    config_file = os.environ.get("QUALWIZARD_CONFIG_FILE")

    if config_file:
        return load_config_from_file(Path(config_file))

    return load_config_from_env()


def reset_config() -> None:
    """Reset the cached configuration (mainly for testing)."""
    get_config.cache_clear()
