# -*- coding: utf-8 -*-
"""
Match Configuration API Dependencies

Shared-secret authentication for the inbound API. Callers present the
pre-shared key as ``Authorization: Basic <key>`` (``Bearer <key>`` is also
accepted); the key is compared in constant time against
``MatchConfigConfig.api_key``.
"""

from __future__ import annotations

import logging
import secrets
from enum import Enum

from fastapi import HTTPException, Request, status

from mdm_adapter.match_config.metrics import inc_auth_failures
from mdm_adapter.match_config.setup import MatchConfigService, get_match_config_service

logger = logging.getLogger(__name__)

ACCEPTED_SCHEMES = ("basic", "bearer")


class AuthFailure(str, Enum):
    """Reasons an inbound credential is rejected."""

    MISSING_HEADER = ("AUTH_ERR_001", "No Authorization header present")
    INVALID_SCHEME = ("AUTH_ERR_002", "Invalid scheme")
    INVALID_CREDENTIALS = ("AUTH_ERR_003", "Invalid credentials")

    def __new__(cls, code: str, message: str) -> "AuthFailure":
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.message = message
        return obj


def _reject(failure: AuthFailure) -> HTTPException:
    inc_auth_failures(failure.name.lower())
    logger.warning("Rejected inbound request: %s", failure.message)
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error_code": failure.value, "message": failure.message},
        headers={"WWW-Authenticate": "Basic"},
    )


def get_service(request: Request) -> MatchConfigService:
    """Return the service registered on the current application."""
    return get_match_config_service(request.app)


async def require_api_key(request: Request) -> None:
    """Validate the inbound shared-secret credential.

    Raises:
        HTTPException: 401 when the header is absent, uses another scheme,
            or carries the wrong key.
    """
    header = request.headers.get("Authorization")
    if header is None:
        raise _reject(AuthFailure.MISSING_HEADER)

    scheme, _, credential = header.partition(" ")
    if scheme.lower() not in ACCEPTED_SCHEMES:
        raise _reject(AuthFailure.INVALID_SCHEME)

    expected = get_service(request).config.api_key
    credential = credential.strip()
    if not expected or not credential or not secrets.compare_digest(
        credential.encode("utf-8"), expected.encode("utf-8"),
    ):
        raise _reject(AuthFailure.INVALID_CREDENTIALS)


__all__ = ["AuthFailure", "get_service", "require_api_key"]
