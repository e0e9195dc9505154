# -*- coding: utf-8 -*-
"""
ESG Engine Configuration

Centralized configuration for the GHG accounting and target-tracking
engine covering:
- Emission factor region defaults and fallback policy
- Flight factor mode (legacy long-haul or haul split)
- Industry benchmark default
- Target pacing tolerance band
- Batch worker pool size
- Provenance and logging settings

All settings can be overridden via environment variables with the
``ESG_ENGINE_`` prefix (e.g. ``ESG_ENGINE_DEFAULT_REGION``).

Example:
    >>> from esg_engine.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.default_region, cfg.on_track_tolerance)
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "ESG_ENGINE_"

_VALID_FLIGHT_MODES = ("legacy_long_haul", "haul_split")


# ---------------------------------------------------------------------------
# EsgEngineConfig
# ---------------------------------------------------------------------------


@dataclass
class EsgEngineConfig:
    """Complete configuration for the ESG engine.

    Attributes:
        default_region: Region used when a request names none, and the
            fallback target for unregistered regions.
        strict_regions: When True an unregistered region raises
            UnknownRegion instead of falling back to default_region.
        flight_factor_mode: ``legacy_long_haul`` charges all flight km at
            the long-haul factor; ``haul_split`` also honours the
            flight_km_short / flight_km_long inputs.
        default_industry: Benchmark row used for unknown industries.
        on_track_tolerance: Fraction of expected progress a target must
            reach to count as on track.
        max_workers: Thread pool size for batch recomputation.
        enable_provenance: Record a SHA-256 chain entry per service action.
        log_level: Logging level for the engine loggers.
        genesis_hash: Seed for the provenance chain.
    """

    # -- Emission factors ----------------------------------------------------
    default_region: str = "europe"
    strict_regions: bool = False
    flight_factor_mode: str = "legacy_long_haul"

    # -- Benchmarks ----------------------------------------------------------
    default_industry: str = "technology"

    # -- Target pacing -------------------------------------------------------
    on_track_tolerance: float = 0.9

    # -- Worker pool ---------------------------------------------------------
    max_workers: int = 4

    # -- Provenance ----------------------------------------------------------
    enable_provenance: bool = True

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    # -- Genesis hash --------------------------------------------------------
    genesis_hash: str = "esg-engine-genesis"

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> EsgEngineConfig:
        """Build an EsgEngineConfig from environment variables.

        Every field can be overridden via ``ESG_ENGINE_<FIELD_UPPER>``.
        Boolean values accept ``true/1/yes`` (case-insensitive).

        Returns:
            Populated EsgEngineConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _bool(name: str, default: bool) -> bool:
            val = _env(name)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val)
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%s, using default %f",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        config = cls(
            default_region=_str("DEFAULT_REGION", cls.default_region),
            strict_regions=_bool("STRICT_REGIONS", cls.strict_regions),
            flight_factor_mode=_str(
                "FLIGHT_FACTOR_MODE", cls.flight_factor_mode,
            ),
            default_industry=_str("DEFAULT_INDUSTRY", cls.default_industry),
            on_track_tolerance=_float(
                "ON_TRACK_TOLERANCE", cls.on_track_tolerance,
            ),
            max_workers=_int("MAX_WORKERS", cls.max_workers),
            enable_provenance=_bool(
                "ENABLE_PROVENANCE", cls.enable_provenance,
            ),
            log_level=_str("LOG_LEVEL", cls.log_level),
            genesis_hash=_str("GENESIS_HASH", cls.genesis_hash),
        )

        logger.info(
            "EsgEngineConfig loaded: region=%s, strict=%s, flights=%s, "
            "industry=%s, tolerance=%.2f, workers=%d, provenance=%s",
            config.default_region,
            config.strict_regions,
            config.flight_factor_mode,
            config.default_industry,
            config.on_track_tolerance,
            config.max_workers,
            config.enable_provenance,
        )
        return config

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def __post_init__(self) -> None:
        """Validate all configuration constraints after initialization.

        Raises:
            ValueError: If any constraint is violated.
        """
        errors: list[str] = []

        if not self.default_region:
            errors.append("default_region must not be empty")
        if self.flight_factor_mode not in _VALID_FLIGHT_MODES:
            errors.append(
                f"flight_factor_mode must be one of {_VALID_FLIGHT_MODES}, "
                f"got '{self.flight_factor_mode}'"
            )
        if not self.default_industry:
            errors.append("default_industry must not be empty")
        if not 0.0 < self.on_track_tolerance <= 1.0:
            errors.append("on_track_tolerance must be in (0.0, 1.0]")
        if self.max_workers < 1:
            errors.append("max_workers must be >= 1")

        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if self.log_level.upper() not in valid_levels:
            errors.append(
                f"log_level must be one of {valid_levels}, "
                f"got '{self.log_level}'"
            )

        if not self.genesis_hash:
            errors.append("genesis_hash must not be empty")

        if errors:
            msg = "; ".join(errors)
            logger.error("EsgEngineConfig validation failed: %s", msg)
            raise ValueError(f"EsgEngineConfig validation failed: {msg}")

        logger.debug("EsgEngineConfig validated successfully")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the configuration to a plain dictionary."""
        return {
            "default_region": self.default_region,
            "strict_regions": self.strict_regions,
            "flight_factor_mode": self.flight_factor_mode,
            "default_industry": self.default_industry,
            "on_track_tolerance": self.on_track_tolerance,
            "max_workers": self.max_workers,
            "enable_provenance": self.enable_provenance,
            "log_level": self.log_level,
            "genesis_hash": self.genesis_hash,
        }


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[EsgEngineConfig] = None
_config_lock = threading.Lock()


def get_config() -> EsgEngineConfig:
    """Return the singleton EsgEngineConfig, creating from env if needed.

    Uses double-checked locking for thread safety with minimal
    contention on the hot path.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = EsgEngineConfig.from_env()
    return _config_instance


def set_config(config: EsgEngineConfig) -> None:
    """Replace the singleton EsgEngineConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("EsgEngineConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "EsgEngineConfig",
    "get_config",
    "set_config",
    "reset_config",
]
