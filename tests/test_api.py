"""
Test suite for the inbound HTTP API

Tests:
- Shared-secret authentication
- GET /matchConfig/{id}, /spec and /$groundTruthScores
- PUT /matchConfig/{id}
- Status mapping (400 for client mistakes, 500 without internal detail)
- Health and metrics endpoints
"""

import pytest
from fastapi.testclient import TestClient

from mdm_adapter.app import create_app
from mdm_adapter.match_config.config import (
    DEFAULT_BOUNDS_HIGH,
    DEFAULT_BOUNDS_LOW,
    MatchConfigConfig,
)


@pytest.fixture
def make_client(config):
    def _make(upstream):
        return TestClient(create_app(config, transport=upstream.transport()))
    return _make


@pytest.fixture
def client(make_client, upstream):
    return make_client(upstream)


class TestAuthentication:
    """Test the shared-secret credential."""

    def test_missing_header(self, client):
        response = client.get("/matchConfig/abc")
        assert response.status_code == 401
        assert response.json()["detail"] == {
            "error_code": "AUTH_ERR_001",
            "message": "No Authorization header present",
        }
        assert response.headers["WWW-Authenticate"] == "Basic"

    def test_invalid_scheme(self, client):
        response = client.get("/matchConfig/abc", headers={"Authorization": "Digest shared-key"})
        assert response.status_code == 401
        assert response.json()["detail"]["error_code"] == "AUTH_ERR_002"

    def test_blank_header_is_invalid_scheme(self, client, upstream):
        """Test a present but empty Authorization header is not reported as missing."""
        response = client.get("/matchConfig/abc", headers={"Authorization": ""})
        assert response.status_code == 401
        assert response.json()["detail"]["error_code"] == "AUTH_ERR_002"
        assert upstream.requests == []

    def test_invalid_credentials(self, client, upstream):
        response = client.get("/matchConfig/abc", headers={"Authorization": "Basic wrong"})
        assert response.status_code == 401
        assert response.json()["detail"]["error_code"] == "AUTH_ERR_003"
        assert upstream.requests == []

    def test_bearer_scheme_accepted(self, client):
        response = client.get("/matchConfig/abc", headers={"Authorization": "Bearer shared-key"})
        assert response.status_code == 200

    def test_unconfigured_key_rejects_everything(self, make_upstream):
        app = create_app(
            MatchConfigConfig(endpoint="http://mdm.test", client_id="c", client_secret="s"),
            transport=make_upstream().transport(),
        )
        response = TestClient(app).get("/matchConfig/abc", headers={"Authorization": "Basic "})
        assert response.status_code == 401


class TestGetMatchConfiguration:
    """Test GET /matchConfig/{id}."""

    def test_end_to_end(self, make_client, make_upstream, simple_xml, auth_headers):
        """Test the simplified JSON for a one-attribute configuration."""
        client = make_client(make_upstream(document=simple_xml))
        response = client.get("/matchConfig/abc", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "matchThreshold": 0.8,
            "nonMatchThreshold": 0.3,
            "attributes": [
                {
                    "key": "SSN",
                    "m": 0.8,
                    "u": 0.1,
                    "bounds": [DEFAULT_BOUNDS_LOW, DEFAULT_BOUNDS_HIGH],
                },
            ],
        }

    def test_blank_identifier(self, client, auth_headers, upstream):
        response = client.get("/matchConfig/%20", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "MDM_INPUT_001"
        assert upstream.requests == []

    def test_malformed_document_is_server_error(self, make_client, make_upstream, auth_headers):
        client = make_client(make_upstream(document=b"<c><scoring/><scoring/></c>"))
        response = client.get("/matchConfig/abc", headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"detail": {"message": "An internal error occurred"}}

    def test_upstream_failure_is_server_error(self, make_client, make_upstream, auth_headers):
        client = make_client(make_upstream(status_overrides={("GET", "/ami/"): 404}))
        response = client.get("/matchConfig/abc", headers=auth_headers)
        assert response.status_code == 500
        assert "ami" not in response.text

    def test_upstream_auth_failure_is_server_error(self, make_client, make_upstream, auth_headers):
        client = make_client(make_upstream(token_response={"error": "invalid_client"}))
        response = client.get("/matchConfig/abc", headers=auth_headers)
        assert response.status_code == 500


class TestSpecification:
    """Test GET /matchConfig/{id}/spec."""

    def test_keys_and_bounds(self, client, auth_headers):
        response = client.get("/matchConfig/abc/spec", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert [item["key"] for item in body] == [
            "identifier[SSN].value",
            "dateOfBirth",
            "name.component[Given].value",
        ]
        assert all(set(item) == {"key", "bounds"} for item in body)


class TestGroundTruthScores:
    """Test GET /matchConfig/{id}/$groundTruthScores."""

    def test_scores_by_category(self, make_client, make_upstream, auth_headers):
        upstream = make_upstream(pages={"MATCH": [[0.93, 0.88]], "NO_MATCH": [[0.12]]})
        response = make_client(upstream).get(
            "/matchConfig/abc/$groundTruthScores", headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"1": [0.93, 0.88], "0": [0.12]}

    def test_failed_page_is_server_error(self, make_client, make_upstream, auth_headers):
        upstream = make_upstream(
            pages={"MATCH": [[0.9], [0.8]]},
            status_overrides={("GET", "/fhir/"): 502},
        )
        response = make_client(upstream).get(
            "/matchConfig/abc/$groundTruthScores", headers=auth_headers,
        )
        assert response.status_code == 500


class TestUpdateMatchConfiguration:
    """Test PUT /matchConfig/{id}."""

    def test_update(self, client, upstream, auth_headers):
        response = client.put(
            "/matchConfig/abc",
            headers=auth_headers,
            json={
                "matchThreshold": 6,
                "nonMatchThreshold": 2,
                "attributes": [{"key": "dateOfBirth", "m": 0.9, "u": 0.05}],
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["matchThreshold"] == 6.0
        date_of_birth = {a["key"]: a for a in body["attributes"]}["dateOfBirth"]
        assert date_of_birth["m"] == 0.9
        assert date_of_birth["u"] == 0.05
        assert len(upstream.puts) == 1

    @pytest.mark.parametrize("content,error_code", [
        (b"", "MDM_INPUT_002"),
        (b"null", "MDM_INPUT_002"),
        (b"{not json", "MDM_INPUT_003"),
        (b'{"nonMatchThreshold": 1}', "MDM_INPUT_003"),
        (b'{"matchThreshold": 2, "nonMatchThreshold": 1, "attributes": [{"key": ""}]}',
         "MDM_INPUT_003"),
    ])
    def test_invalid_body(self, client, upstream, auth_headers, content, error_code):
        response = client.put(
            "/matchConfig/abc",
            headers={**auth_headers, "Content-Type": "application/json"},
            content=content,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == error_code
        assert upstream.requests == []

    def test_unknown_key(self, client, upstream, auth_headers):
        response = client.put(
            "/matchConfig/abc",
            headers=auth_headers,
            json={
                "matchThreshold": 6,
                "nonMatchThreshold": 2,
                "attributes": [{"key": "gender", "m": 0.6, "u": 0.5}],
            },
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "MDM_INPUT_004"
        assert upstream.puts == []

    def test_threshold_order(self, client, auth_headers):
        response = client.put(
            "/matchConfig/abc",
            headers=auth_headers,
            json={"matchThreshold": 1, "nonMatchThreshold": 2, "attributes": []},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "MDM_INPUT_005"

    @pytest.mark.parametrize("attribute", [
        {"key": "dateOfBirth", "m": 1.0, "u": 0.5},
        {"key": "dateOfBirth", "m": 0.5, "u": 0.0},
        {"key": "dateOfBirth", "m": 0.95, "u": 0.5, "bounds": [0.2, 0.8]},
    ])
    def test_probability_out_of_range(self, client, upstream, auth_headers, attribute):
        response = client.put(
            "/matchConfig/abc",
            headers=auth_headers,
            json={"matchThreshold": 6, "nonMatchThreshold": 2, "attributes": [attribute]},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "MDM_INPUT_003"
        assert upstream.requests == []

    @pytest.mark.parametrize("threshold", [b"NaN", b"Infinity", b"-Infinity"])
    def test_non_finite_threshold(self, client, upstream, auth_headers, threshold):
        """Test NaN and infinite thresholds never reach the upstream document."""
        response = client.put(
            "/matchConfig/abc",
            headers={**auth_headers, "Content-Type": "application/json"},
            content=b'{"matchThreshold": ' + threshold
            + b', "nonMatchThreshold": 1, "attributes": []}',
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "MDM_INPUT_003"
        assert upstream.puts == []
        assert upstream.requests == []

    def test_missing_probability(self, client, auth_headers):
        response = client.put(
            "/matchConfig/abc",
            headers=auth_headers,
            json={
                "matchThreshold": 6,
                "nonMatchThreshold": 2,
                "attributes": [{"key": "dateOfBirth", "m": 0.9}],
            },
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error_code"] == "MDM_INPUT_006"


class TestOperationalEndpoints:
    """Test health and metrics."""

    def test_health_unauthenticated(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics(self, client, auth_headers):
        client.get("/matchConfig/abc", headers=auth_headers)
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "mdm_upstream_requests_total" in response.text
