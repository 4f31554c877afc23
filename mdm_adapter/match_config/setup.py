# -*- coding: utf-8 -*-
"""
Match Configuration Service Facade

Provides the main service class and FastAPI integration functions:
- MatchConfigService: Composes the gateway, reader, patcher and aggregator
- configure_match_config(app): Register service on FastAPI app
- get_match_config_service(app): Retrieve service from app state
- get_router(): Return FastAPI router for mounting

Each operation opens its own RemoteGateway, obtains one access token and
reuses it for every upstream call of that operation.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

import httpx

from mdm_adapter.connectors.errors import GatewayError
from mdm_adapter.connectors.remote_gateway import RemoteGateway
from mdm_adapter.exceptions import ErrorKind, InputValidationError, MdmAdapterException, ThresholdOrderError
from mdm_adapter.match_config.config import MatchConfigConfig, get_config
from mdm_adapter.match_config.configuration_patcher import patch_configuration
from mdm_adapter.match_config.configuration_reader import (
    read_attribute_specification,
    read_match_configuration,
)
from mdm_adapter.match_config.ground_truth_aggregator import GroundTruthAggregator
from mdm_adapter.match_config.metrics import inc_errors, observe_duration
from mdm_adapter.match_config.models import (
    AttributeSpecification,
    GroundTruthScores,
    MatchConfiguration,
)

logger = logging.getLogger(__name__)

_SERVICE_KEY = "match_config_service"

T = TypeVar("T")


class MatchConfigService:
    """Facade over the upstream MDM match configuration.

    Attributes:
        config: MatchConfigConfig instance.
    """

    def __init__(
        self,
        config: Optional[MatchConfigConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the service.

        Args:
            config: MatchConfigConfig instance. If None, loads from env.
            transport: Optional httpx transport handed to every gateway.
        """
        if config is None:
            config = get_config()

        self.config = config
        self._transport = transport

        logger.info(
            "MatchConfigService initialized against %s", config.endpoint,
        )

    def _gateway(self) -> RemoteGateway:
        return RemoteGateway(self.config, transport=self._transport)

    @staticmethod
    def _require_id(configuration_id: Optional[str]) -> str:
        if configuration_id is None or not configuration_id.strip():
            raise InputValidationError(ErrorKind.MISSING_IDENTIFIER)
        return configuration_id

    async def _timed(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        start_time = time.monotonic()
        try:
            return await call()
        except (MdmAdapterException, GatewayError) as e:
            inc_errors(operation, type(e).__name__)
            raise
        finally:
            observe_duration(operation, time.monotonic() - start_time)

    # =========================================================================
    # Match configuration
    # =========================================================================

    async def get_match_configuration(self, configuration_id: str) -> MatchConfiguration:
        """Retrieve the simplified match configuration.

        Raises:
            InputValidationError: If ``configuration_id`` is blank.
            DocumentStructureError: If the upstream document is malformed.
            GatewayError: On any upstream failure.
        """
        configuration_id = self._require_id(configuration_id)

        async def call() -> MatchConfiguration:
            async with self._gateway() as gateway:
                token = await gateway.authenticate()
                document = await gateway.fetch_match_configuration(configuration_id, token)
            return read_match_configuration(document, self.config.bounds)

        return await self._timed("get_match_configuration", call)

    async def get_configuration_specification(
        self,
        configuration_id: str,
    ) -> List[AttributeSpecification]:
        """Retrieve the bounds-only view of every attribute."""
        configuration_id = self._require_id(configuration_id)

        async def call() -> List[AttributeSpecification]:
            async with self._gateway() as gateway:
                token = await gateway.authenticate()
                document = await gateway.fetch_match_configuration(configuration_id, token)
            return read_attribute_specification(document, self.config.bounds)

        return await self._timed("get_configuration_specification", call)

    async def update_match_configuration(
        self,
        configuration_id: str,
        configuration: Optional[MatchConfiguration],
    ) -> MatchConfiguration:
        """Patch the upstream configuration and return the re-read result.

        Steps: fetch, patch in memory, PUT, fetch again, read. A failure at
        any step aborts the operation; nothing is sent upstream unless the
        patch succeeded in full.

        Raises:
            InputValidationError: Blank id, missing body, unknown key, missing
                m/u or threshold ordering violation.
            WeightDomainError: If a supplied m/u is outside (0, 1).
            DocumentStructureError: If the upstream document is malformed.
            GatewayError: On any upstream failure.
        """
        configuration_id = self._require_id(configuration_id)
        if configuration is None:
            raise InputValidationError(ErrorKind.MISSING_BODY)

        if (
            self.config.enforce_threshold_order
            and configuration.match_threshold < configuration.non_match_threshold
        ):
            raise ThresholdOrderError(
                context={
                    "matchThreshold": configuration.match_threshold,
                    "nonMatchThreshold": configuration.non_match_threshold,
                },
            )

        async def call() -> MatchConfiguration:
            async with self._gateway() as gateway:
                token = await gateway.authenticate()
                document = await gateway.fetch_match_configuration(configuration_id, token)
                patch_configuration(document, configuration)
                await gateway.update_match_configuration(configuration_id, document, token)
                updated = await gateway.fetch_match_configuration(configuration_id, token)
            return read_match_configuration(updated, self.config.bounds)

        result = await self._timed("update_match_configuration", call)
        logger.info(
            "Match configuration %s updated: %d attributes supplied",
            configuration_id, len(configuration.attributes),
        )
        return result

    # =========================================================================
    # Ground truth
    # =========================================================================

    async def get_ground_truth_scores(self, configuration_id: str) -> GroundTruthScores:
        """Aggregate manually annotated link scores for ``configuration_id``."""
        configuration_id = self._require_id(configuration_id)

        async def call() -> GroundTruthScores:
            async with self._gateway() as gateway:
                token = await gateway.authenticate()
                aggregator = GroundTruthAggregator(
                    gateway,
                    page_size=self.config.page_size,
                    max_pages=self.config.max_pages,
                )
                return await aggregator.aggregate(configuration_id, token)

        return await self._timed("get_ground_truth_scores", call)


# ===================================================================
# FastAPI integration
# ===================================================================


def configure_match_config(
    app: Any,
    config: Optional[MatchConfigConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> MatchConfigService:
    """Register the Match Configuration Service on a FastAPI application.

    Creates the service, attaches it to app.state, and includes the
    API router.

    Args:
        app: FastAPI application instance.
        config: Optional configuration; loaded from env when omitted.
        transport: Optional httpx transport for upstream calls.

    Returns:
        Configured MatchConfigService instance.
    """
    service = MatchConfigService(config=config, transport=transport)
    setattr(app.state, _SERVICE_KEY, service)

    from mdm_adapter.match_config.api.router import router
    app.include_router(router)

    logger.info("Match Configuration Service configured on FastAPI app")
    return service


def get_match_config_service(app: Any) -> MatchConfigService:
    """Retrieve the Match Configuration Service from a FastAPI application.

    Raises:
        RuntimeError: If service not configured.
    """
    service = getattr(app.state, _SERVICE_KEY, None)
    if service is None:
        raise RuntimeError(
            "Match Configuration Service not configured. "
            "Call configure_match_config(app) first."
        )
    return service


def get_router():
    """Return the FastAPI router for the Match Configuration Service."""
    from mdm_adapter.match_config.api.router import router
    return router


__all__ = [
    "MatchConfigService",
    "configure_match_config",
    "get_match_config_service",
    "get_router",
]
