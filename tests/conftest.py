# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

import json
from typing import Dict, List, Optional, Sequence, Tuple

import httpx
import pytest

from mdm_adapter.match_config.config import MatchConfigConfig, reset_config

SAMPLE_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<MatchConfiguration xmlns="http://santedb.org/matcher" id="org.santedb.matcher.example" matchThreshold="5" nonmatchThreshold="1.5">
  <target resource="Patient" />
  <blocking maxResults="100" />
  <scoring>
    <attribute property="identifier[SSN].value" m="0.9" u="0.2" matchWeight="2.169925001442312" nonMatchWeight="-2.9999999999999996" />
    <attribute property="dateOfBirth" m="0.7" u="0.3" />
    <attribute property="name.component[Given].value" m="0.85" u="0.15" />
  </scoring>
</MatchConfiguration>
"""

SIMPLE_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<MatchConfiguration id="abc" matchThreshold="0.8" nonmatchThreshold="0.3">
  <scoring>
    <attribute property="SSN" m="0.8" u="0.1" />
  </scoring>
</MatchConfiguration>
"""

ACCESS_TOKEN = "upstream-token"
API_KEY = "shared-key"


def link_page(category: str, scores: Sequence[float], has_next: bool) -> Dict:
    """Build a ``$mdm-query-links`` Parameters page in JSON form."""
    parameters: List[Dict] = [
        {
            "name": "link",
            "part": [
                {"name": "goldenResourceId", "valueString": f"Patient/{i}"},
                {"name": "matchResult", "valueString": category},
                {"name": "linkSource", "valueString": "MANUAL"},
                {"name": "score", "valueDecimal": score},
            ],
        }
        for i, score in enumerate(scores)
    ]
    if has_next:
        parameters.insert(0, {"name": "next", "valueUri": "http://mdm.test/next"})
    return {"resourceType": "Parameters", "parameter": parameters}


class FakeUpstream:
    """In-memory MDM service served through ``httpx.MockTransport``.

    ``pages`` maps a matchResult value to the score lists of its pages;
    every page but the last carries a ``next`` parameter.
    """

    def __init__(
        self,
        document: bytes = SAMPLE_XML,
        pages: Optional[Dict[str, List[List[float]]]] = None,
        token_response: Optional[Dict] = None,
        status_overrides: Optional[Dict[Tuple[str, str], int]] = None,
    ):
        self.document = document
        self.pages = pages or {}
        self.token_response = token_response or {
            "access_token": ACCESS_TOKEN,
            "token_type": "bearer",
        }
        self.status_overrides = status_overrides or {}
        self.requests: List[httpx.Request] = []
        self.puts: List[bytes] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def link_requests(self, category: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.path.endswith("$mdm-query-links")
            and r.url.params.get("matchResult") == category
        ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for (method, prefix), status in self.status_overrides.items():
            if request.method == method and path.startswith(prefix):
                return httpx.Response(status)

        if path == "/auth/oauth2_token":
            return httpx.Response(200, json=self.token_response)

        if request.headers.get("Authorization") != f"Bearer {ACCESS_TOKEN}":
            return httpx.Response(401)

        if path.startswith("/ami/MatchConfiguration/"):
            if request.method == "PUT":
                self.puts.append(request.content)
                self.document = request.content
                return httpx.Response(200)
            return httpx.Response(
                200,
                content=self.document,
                headers={"content-type": "application/xml"},
            )

        if path == "/fhir/Patient/$mdm-query-links":
            category = request.url.params["matchResult"]
            count = int(request.url.params["_count"])
            offset = int(request.url.params["_offset"])
            pages = self.pages.get(category, [])
            index = offset // count
            scores = pages[index] if index < len(pages) else []
            return httpx.Response(
                200,
                content=json.dumps(link_page(category, scores, index + 1 < len(pages))),
                headers={"content-type": "application/fhir+json"},
            )

        return httpx.Response(404)


@pytest.fixture(autouse=True)
def _reset_config_singleton():
    yield
    reset_config()


@pytest.fixture
def config() -> MatchConfigConfig:
    """Adapter configuration pointing at the fake upstream."""
    return MatchConfigConfig(
        endpoint="http://mdm.test/",
        client_id="ml-client",
        client_secret="ml-secret",
        api_key=API_KEY,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_upstream():
    """Factory for FakeUpstream instances with custom documents or pages."""
    return FakeUpstream


@pytest.fixture
def sample_xml() -> bytes:
    return SAMPLE_XML


@pytest.fixture
def simple_xml() -> bytes:
    return SIMPLE_XML


@pytest.fixture
def access_token() -> str:
    return ACCESS_TOKEN


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    """Inbound credential accepted by the adapter."""
    return {"Authorization": f"Basic {API_KEY}"}


@pytest.fixture
def build_link_page():
    return link_page
