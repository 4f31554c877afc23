# -*- coding: utf-8 -*-
"""
Remote Gateway - upstream MDM service connector.

Performs the authenticated HTTP calls the adapter needs:

- ``POST {endpoint}/auth/oauth2_token`` (client credentials)
- ``GET/PUT {endpoint}/ami/MatchConfiguration/{id}`` (administrative XML)
- ``GET {endpoint}/fhir/Patient/$mdm-query-links`` (FHIR Parameters)

Every non-success answer is raised as a classified GatewayError; nothing
is retried. Calls are async so cancelling the caller cancels the in-flight
request.

Example:
    >>> async with RemoteGateway(config) as gateway:
    ...     token = await gateway.authenticate()
    ...     document = await gateway.fetch_match_configuration("org.santedb.matcher.example", token)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from mdm_adapter.connectors.errors import (
    GatewayAuthError,
    GatewayError,
    GatewayProtocolError,
    classify_gateway_error,
)
from mdm_adapter.exceptions import ConfigurationError, ErrorKind
from mdm_adapter.match_config.config import MatchConfigConfig
from mdm_adapter.match_config.document import ConfigurationDocument
from mdm_adapter.match_config.fhir_mapper import parse_parameters_json, parse_parameters_xml
from mdm_adapter.match_config.metrics import inc_upstream_requests
from mdm_adapter.match_config.models import LinkMatchResult

logger = logging.getLogger(__name__)

TOKEN_PATH = "/auth/oauth2_token"
MATCH_CONFIGURATION_PATH = "/ami/MatchConfiguration/{id}"
QUERY_LINKS_PATH = "/fhir/Patient/$mdm-query-links"

#: Only human-verified links count as ground truth.
MANUAL_LINK_SOURCE = "MANUAL"

XML_CONTENT_TYPE = "application/xml"
FHIR_CONTENT_TYPES = {
    "json": "application/fhir+json",
    "xml": "application/fhir+xml",
}


class RemoteGateway:
    """Async client for the upstream MDM service.

    One instance is opened per inbound operation and used as an async
    context manager; the underlying ``httpx.AsyncClient`` is closed on exit
    unless it was supplied by the caller.

    Attributes:
        config: MatchConfigConfig instance.
    """

    def __init__(
        self,
        config: MatchConfigConfig,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> RemoteGateway:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.endpoint,
                timeout=httpx.Timeout(self.config.request_timeout_seconds),
                verify=self.config.verify_tls,
                transport=self._transport,
            )
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("RemoteGateway used outside of 'async with'")
        return self._client

    # =========================================================================
    # Transport
    # =========================================================================

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            inc_upstream_requests(operation, "error")
            error = classify_gateway_error(e, operation, url)
            logger.error("Upstream call failed: %s", error)
            raise error from e

        inc_upstream_requests(operation, "success")
        return response

    @staticmethod
    def _bearer(access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    # =========================================================================
    # Authentication
    # =========================================================================

    async def authenticate(self) -> str:
        """Obtain an access token with the client-credentials grant.

        Returns:
            Access token string.

        Raises:
            ConfigurationError: If client id or secret is not configured.
            GatewayAuthError: If the token endpoint reports an error or
                returns no ``access_token``.
        """
        operation = "authenticate"
        if not self.config.client_id or not self.config.client_secret:
            raise ConfigurationError(
                ErrorKind.MISSING_SETTING,
                message="The client id and the client secret cannot be null or empty",
            )

        form = {
            "grant_type": "client_credentials",
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
        }

        try:
            response = await self.client.post(TOKEN_PATH, data=form)
        except httpx.HTTPError as e:
            inc_upstream_requests(operation, "error")
            raise classify_gateway_error(e, operation, TOKEN_PATH) from e

        try:
            content = response.json()
        except ValueError:
            content = None

        if not isinstance(content, dict):
            inc_upstream_requests(operation, "error")
            if response.is_success:
                raise GatewayProtocolError(
                    "Token response is not a JSON object",
                    operation=operation,
                    status_code=response.status_code,
                    url=TOKEN_PATH,
                )
            raise GatewayAuthError(
                "Unable to authenticate against the MDM service",
                operation=operation,
                status_code=response.status_code,
                url=TOKEN_PATH,
            )

        if "error" in content:
            inc_upstream_requests(operation, "error")
            logger.error(
                "Unable to authenticate against the MDM service: %s",
                content.get("error"),
            )
            raise GatewayAuthError(
                "Unable to authenticate against the MDM service",
                operation=operation,
                status_code=response.status_code,
                url=TOKEN_PATH,
                context={"error": content.get("error")},
            )

        access_token = content.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            inc_upstream_requests(operation, "error")
            logger.error("Authentication response did not contain an 'access_token'")
            raise GatewayAuthError(
                "Authentication response did not contain an 'access_token'",
                operation=operation,
                status_code=response.status_code,
                url=TOKEN_PATH,
            )

        inc_upstream_requests(operation, "success")
        return access_token

    # =========================================================================
    # Match configuration
    # =========================================================================

    @staticmethod
    def _configuration_path(configuration_id: str) -> str:
        return MATCH_CONFIGURATION_PATH.format(id=quote(configuration_id, safe=""))

    async def fetch_match_configuration(
        self,
        configuration_id: str,
        access_token: str,
    ) -> ConfigurationDocument:
        """Retrieve the raw match configuration document.

        Raises:
            GatewayError: On any non-success answer or transport failure.
            DocumentStructureError: If the body is not well-formed XML.
        """
        path = self._configuration_path(configuration_id)
        logger.debug("Attempting to retrieve match config: %s", configuration_id)

        response = await self._send(
            "fetch_match_configuration",
            "GET",
            path,
            headers={"Accept": XML_CONTENT_TYPE, **self._bearer(access_token)},
        )

        document = ConfigurationDocument.from_xml(response.content)
        logger.debug("Match config retrieved: %s", configuration_id)
        return document

    async def update_match_configuration(
        self,
        configuration_id: str,
        document: ConfigurationDocument,
        access_token: str,
    ) -> None:
        """Replace the remote match configuration with ``document``.

        Raises:
            GatewayError: On any non-success answer or transport failure.
        """
        path = self._configuration_path(configuration_id)
        logger.debug("Attempting to update match config: %s", configuration_id)

        await self._send(
            "update_match_configuration",
            "PUT",
            path,
            content=document.to_bytes(),
            headers={
                "Accept": XML_CONTENT_TYPE,
                "Content-Type": XML_CONTENT_TYPE,
                **self._bearer(access_token),
            },
        )

        logger.info("Match config updated upstream: %s", configuration_id)

    # =========================================================================
    # Ground truth links
    # =========================================================================

    async def query_links(
        self,
        configuration_id: str,
        match_result: LinkMatchResult,
        count: int,
        offset: int,
        access_token: str,
    ) -> Dict[str, Any]:
        """Fetch one page of manually annotated links.

        Returns:
            The page as a JSON-shaped FHIR Parameters resource.

        Raises:
            GatewayError: On any non-success answer or transport failure.
            GatewayProtocolError: If the body is not a Parameters resource.
        """
        operation = "query_links"
        params = {
            "_configurationName": configuration_id,
            "linkSource": MANUAL_LINK_SOURCE,
            "_count": str(count),
            "_offset": str(offset),
            "matchResult": match_result.value,
        }
        accept = FHIR_CONTENT_TYPES[self.config.fhir_format]

        response = await self._send(
            operation,
            "GET",
            QUERY_LINKS_PATH,
            params=params,
            headers={"Accept": accept, **self._bearer(access_token)},
        )

        content_type = response.headers.get("content-type", accept)
        try:
            if "xml" in content_type:
                return parse_parameters_xml(response.content)
            return parse_parameters_json(response.content)
        except ValueError as e:
            raise GatewayProtocolError(
                str(e),
                operation=operation,
                status_code=response.status_code,
                url=QUERY_LINKS_PATH,
                original_error=e,
            ) from e


__all__ = [
    "RemoteGateway",
    "GatewayError",
    "MANUAL_LINK_SOURCE",
]
