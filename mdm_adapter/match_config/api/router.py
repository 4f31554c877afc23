# -*- coding: utf-8 -*-
"""
Match Configuration REST API Router

Endpoints (all require the shared-secret credential):
    GET  /matchConfig/{configuration_id}                    - Simplified configuration
    GET  /matchConfig/{configuration_id}/spec               - Attribute bounds
    GET  /matchConfig/{configuration_id}/$groundTruthScores - Ground-truth scores
    PUT  /matchConfig/{configuration_id}                    - Patch and return configuration

Client mistakes map to 400. Malformed upstream documents, gateway failures
and anything unexpected map to 500 with a generic body.
"""

from __future__ import annotations

import json
import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from mdm_adapter.connectors.errors import GatewayError
from mdm_adapter.exceptions import (
    ErrorKind,
    InputValidationError,
    MdmAdapterException,
    WeightDomainError,
)
from mdm_adapter.match_config.api.dependencies import get_service, require_api_key
from mdm_adapter.match_config.models import (
    AttributeSpecification,
    GroundTruthScores,
    MatchConfiguration,
)
from mdm_adapter.match_config.setup import MatchConfigService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/matchConfig",
    tags=["match-config"],
    dependencies=[Depends(require_api_key)],
)

_INTERNAL_ERROR = {"message": "An internal error occurred"}


def _raise_http(exc: Exception, operation: str) -> NoReturn:
    if isinstance(exc, (InputValidationError, WeightDomainError)):
        logger.info("%s rejected: %s", operation, exc)
        raise HTTPException(
            status_code=400,
            detail={"error_code": exc.error_code, "message": exc.message},
        )
    if isinstance(exc, (MdmAdapterException, GatewayError)):
        logger.error("%s failed: %s", operation, exc)
    else:
        logger.exception("%s failed unexpectedly", operation)
    raise HTTPException(status_code=500, detail=_INTERNAL_ERROR)


async def _read_body(request: Request) -> MatchConfiguration:
    raw = await request.body()
    if not raw.strip():
        raise InputValidationError(ErrorKind.MISSING_BODY)
    try:
        payload = json.loads(raw)
    except ValueError:
        raise InputValidationError(ErrorKind.INVALID_BODY)
    if payload is None:
        raise InputValidationError(ErrorKind.MISSING_BODY)
    try:
        return MatchConfiguration.model_validate(payload)
    except ValidationError as e:
        raise InputValidationError(
            ErrorKind.INVALID_BODY,
            context={"errors": e.errors(include_url=False, include_context=False)},
        )


# ------------------------------------------------------------------
# 1. GET /matchConfig/{configuration_id}
# ------------------------------------------------------------------
@router.get(
    "/{configuration_id}",
    response_model=MatchConfiguration,
    response_model_exclude_none=True,
)
async def get_match_configuration(
    configuration_id: str,
    service: MatchConfigService = Depends(get_service),
) -> MatchConfiguration:
    """Return the simplified match configuration."""
    try:
        return await service.get_match_configuration(configuration_id)
    except Exception as exc:
        _raise_http(exc, "get_match_configuration")


# ------------------------------------------------------------------
# 2. GET /matchConfig/{configuration_id}/spec
# ------------------------------------------------------------------
@router.get(
    "/{configuration_id}/spec",
    response_model=List[AttributeSpecification],
)
async def get_configuration_specification(
    configuration_id: str,
    service: MatchConfigService = Depends(get_service),
) -> List[AttributeSpecification]:
    """Return the key and bounds of every attribute."""
    try:
        return await service.get_configuration_specification(configuration_id)
    except Exception as exc:
        _raise_http(exc, "get_configuration_specification")


# ------------------------------------------------------------------
# 3. GET /matchConfig/{configuration_id}/$groundTruthScores
# ------------------------------------------------------------------
@router.get(
    "/{configuration_id}/$groundTruthScores",
    response_model=GroundTruthScores,
)
async def get_ground_truth_scores(
    configuration_id: str,
    service: MatchConfigService = Depends(get_service),
) -> GroundTruthScores:
    """Return manually verified link scores split into matches and non-matches."""
    try:
        return await service.get_ground_truth_scores(configuration_id)
    except Exception as exc:
        _raise_http(exc, "get_ground_truth_scores")


# ------------------------------------------------------------------
# 4. PUT /matchConfig/{configuration_id}
# ------------------------------------------------------------------
@router.put(
    "/{configuration_id}",
    response_model=MatchConfiguration,
    response_model_exclude_none=True,
)
async def put_match_configuration(
    configuration_id: str,
    request: Request,
    service: MatchConfigService = Depends(get_service),
) -> MatchConfiguration:
    """Apply thresholds and m/u values, then return the stored configuration."""
    try:
        configuration = await _read_body(request)
        return await service.update_match_configuration(configuration_id, configuration)
    except Exception as exc:
        _raise_http(exc, "update_match_configuration")


__all__ = ["router"]
