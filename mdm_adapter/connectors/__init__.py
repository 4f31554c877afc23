# -*- coding: utf-8 -*-
"""Upstream MDM connectors."""

from mdm_adapter.connectors.errors import (
    GatewayAuthError,
    GatewayBadRequest,
    GatewayError,
    GatewayNetworkError,
    GatewayNotFound,
    GatewayProtocolError,
    GatewayServerError,
    GatewayTimeoutError,
    classify_gateway_error,
)
from mdm_adapter.connectors.remote_gateway import RemoteGateway

__all__ = [
    "RemoteGateway",
    "GatewayError",
    "GatewayAuthError",
    "GatewayNetworkError",
    "GatewayTimeoutError",
    "GatewayNotFound",
    "GatewayBadRequest",
    "GatewayServerError",
    "GatewayProtocolError",
    "classify_gateway_error",
]
