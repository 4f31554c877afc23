# -*- coding: utf-8 -*-
"""
Match Configuration Adapter Settings

Centralized configuration for the MDM match-configuration adapter covering:
- Upstream MDM endpoint and client credentials
- Inbound shared secret
- Attribute bounds (clamp range reported for each m/u pair)
- Ground-truth pagination (page size, page ceiling)
- Upstream request timeout and TLS verification
- FHIR wire format for link queries
- Threshold ordering enforcement
- Logging level

All settings can be overridden via environment variables with the
``MDM_ADAPTER_`` prefix (e.g. ``MDM_ADAPTER_ENDPOINT``).

Example:
    >>> from mdm_adapter.match_config.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.page_size, cfg.bounds)
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "MDM_ADAPTER_"

#: Canonical clamp range for m/u probabilities.
DEFAULT_BOUNDS_LOW: float = 1e-8
DEFAULT_BOUNDS_HIGH: float = 1 - 1e-8

_FHIR_FORMATS = ("json", "xml")


# ---------------------------------------------------------------------------
# MatchConfigConfig
# ---------------------------------------------------------------------------


@dataclass
class MatchConfigConfig:
    """Complete configuration for the match-configuration adapter.

    Attributes:
        endpoint: Base URL of the upstream MDM service (no trailing slash).
        client_id: OAuth2 client id used against ``/auth/oauth2_token``.
        client_secret: OAuth2 client secret.
        api_key: Pre-shared key expected on inbound requests.
        bounds_low: Lower clamp value reported in each attribute's bounds.
        bounds_high: Upper clamp value reported in each attribute's bounds.
        page_size: ``_count`` used for ground-truth link queries.
        max_pages: Maximum pages fetched per category before aborting.
        request_timeout_seconds: Per-call upstream timeout.
        verify_tls: Whether to verify the upstream TLS certificate.
        fhir_format: ``json`` or ``xml`` representation for link queries.
        enforce_threshold_order: Reject updates whose matchThreshold is
            below nonMatchThreshold.
        log_level: Logging level for the adapter.
    """

    # -- Upstream ------------------------------------------------------------
    endpoint: str = "http://localhost:8080"
    client_id: str = ""
    client_secret: str = ""

    # -- Inbound -------------------------------------------------------------
    api_key: str = ""

    # -- Attribute bounds ----------------------------------------------------
    bounds_low: float = DEFAULT_BOUNDS_LOW
    bounds_high: float = DEFAULT_BOUNDS_HIGH

    # -- Ground truth pagination ---------------------------------------------
    page_size: int = 1000
    max_pages: int = 10000

    # -- Transport -----------------------------------------------------------
    request_timeout_seconds: float = 30.0
    verify_tls: bool = True
    fhir_format: str = "json"

    # -- Validation ----------------------------------------------------------
    enforce_threshold_order: bool = True

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.endpoint = self.endpoint.rstrip("/")
        if self.fhir_format not in _FHIR_FORMATS:
            raise ValueError(
                f"fhir_format must be one of {_FHIR_FORMATS}, got {self.fhir_format!r}"
            )
        if not 0.0 <= self.bounds_low <= self.bounds_high <= 1.0:
            raise ValueError(
                f"bounds must satisfy 0 <= low <= high <= 1, "
                f"got [{self.bounds_low}, {self.bounds_high}]"
            )
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.max_pages <= 0:
            raise ValueError(f"max_pages must be positive, got {self.max_pages}")

    @property
    def bounds(self) -> Tuple[float, float]:
        """Configured clamp pair as ``(low, high)``."""
        return (self.bounds_low, self.bounds_high)

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> MatchConfigConfig:
        """Build a MatchConfigConfig from environment variables.

        Every field can be overridden via ``MDM_ADAPTER_<FIELD_UPPER>``.
        Boolean values accept ``true/1/yes`` (case-insensitive).

        Returns:
            Populated MatchConfigConfig instance.
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
                    "Invalid float for %s%s=%s, using default %s",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        config = cls(
            endpoint=_str("ENDPOINT", cls.endpoint),
            client_id=_str("CLIENT_ID", cls.client_id),
            client_secret=_str("CLIENT_SECRET", cls.client_secret),
            api_key=_str("API_KEY", cls.api_key),
            bounds_low=_float("BOUNDS_LOW", cls.bounds_low),
            bounds_high=_float("BOUNDS_HIGH", cls.bounds_high),
            page_size=_int("PAGE_SIZE", cls.page_size),
            max_pages=_int("MAX_PAGES", cls.max_pages),
            request_timeout_seconds=_float(
                "REQUEST_TIMEOUT_SECONDS", cls.request_timeout_seconds,
            ),
            verify_tls=_bool("VERIFY_TLS", cls.verify_tls),
            fhir_format=_str("FHIR_FORMAT", cls.fhir_format).lower(),
            enforce_threshold_order=_bool(
                "ENFORCE_THRESHOLD_ORDER", cls.enforce_threshold_order,
            ),
            log_level=_str("LOG_LEVEL", cls.log_level),
        )

        logger.info(
            "MatchConfigConfig loaded: endpoint=%s, bounds=[%s, %s], "
            "page_size=%d, max_pages=%d, timeout=%.1fs, verify_tls=%s, "
            "fhir_format=%s, enforce_threshold_order=%s",
            config.endpoint,
            config.bounds_low,
            config.bounds_high,
            config.page_size,
            config.max_pages,
            config.request_timeout_seconds,
            config.verify_tls,
            config.fhir_format,
            config.enforce_threshold_order,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[MatchConfigConfig] = None
_config_lock = threading.Lock()


def get_config() -> MatchConfigConfig:
    """Return the singleton MatchConfigConfig, creating from env if needed.

    Returns:
        MatchConfigConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = MatchConfigConfig.from_env()
    return _config_instance


def set_config(config: MatchConfigConfig) -> None:
    """Replace the singleton MatchConfigConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("MatchConfigConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "DEFAULT_BOUNDS_LOW",
    "DEFAULT_BOUNDS_HIGH",
    "MatchConfigConfig",
    "get_config",
    "set_config",
    "reset_config",
]
