"""
Test suite for MatchConfigConfig

Tests:
- Defaults
- Environment overrides with the MDM_ADAPTER_ prefix
- Validation in __post_init__
- Singleton accessors
"""

import pytest

from mdm_adapter.match_config.config import (
    DEFAULT_BOUNDS_HIGH,
    DEFAULT_BOUNDS_LOW,
    MatchConfigConfig,
    get_config,
    reset_config,
    set_config,
)


class TestDefaults:
    """Test default settings."""

    def test_defaults(self):
        config = MatchConfigConfig()
        assert config.bounds == (1e-8, 1 - 1e-8)
        assert config.page_size == 1000
        assert config.fhir_format == "json"
        assert config.enforce_threshold_order is True
        assert config.verify_tls is True

    def test_trailing_slash_removed(self):
        """Test the endpoint is normalised without a trailing slash."""
        assert MatchConfigConfig(endpoint="https://mdm.example/").endpoint == "https://mdm.example"


class TestValidation:
    """Test invalid settings are rejected."""

    def test_unknown_fhir_format(self):
        with pytest.raises(ValueError, match="fhir_format"):
            MatchConfigConfig(fhir_format="turtle")

    @pytest.mark.parametrize("low,high", [(0.6, 0.4), (-0.1, 0.5), (0.1, 1.5)])
    def test_bad_bounds(self, low, high):
        with pytest.raises(ValueError, match="bounds"):
            MatchConfigConfig(bounds_low=low, bounds_high=high)

    def test_page_size_positive(self):
        with pytest.raises(ValueError, match="page_size"):
            MatchConfigConfig(page_size=0)

    @pytest.mark.parametrize("max_pages", [0, -1])
    def test_max_pages_positive(self, max_pages):
        with pytest.raises(ValueError, match="max_pages"):
            MatchConfigConfig(max_pages=max_pages)

    def test_max_pages_from_env(self, monkeypatch):
        """Test a zero page ceiling in the environment is rejected at load."""
        monkeypatch.setenv("MDM_ADAPTER_MAX_PAGES", "0")
        with pytest.raises(ValueError, match="max_pages"):
            MatchConfigConfig.from_env()


class TestFromEnv:
    """Test environment overrides."""

    def test_overrides(self, monkeypatch):
        """Test every kind of value is read from the environment."""
        monkeypatch.setenv("MDM_ADAPTER_ENDPOINT", "https://mdm.example/")
        monkeypatch.setenv("MDM_ADAPTER_CLIENT_ID", "client")
        monkeypatch.setenv("MDM_ADAPTER_CLIENT_SECRET", "secret")
        monkeypatch.setenv("MDM_ADAPTER_API_KEY", "key")
        monkeypatch.setenv("MDM_ADAPTER_PAGE_SIZE", "250")
        monkeypatch.setenv("MDM_ADAPTER_BOUNDS_LOW", "0.001")
        monkeypatch.setenv("MDM_ADAPTER_VERIFY_TLS", "false")
        monkeypatch.setenv("MDM_ADAPTER_FHIR_FORMAT", "XML")
        monkeypatch.setenv("MDM_ADAPTER_ENFORCE_THRESHOLD_ORDER", "0")

        config = MatchConfigConfig.from_env()

        assert config.endpoint == "https://mdm.example"
        assert config.client_id == "client"
        assert config.client_secret == "secret"
        assert config.api_key == "key"
        assert config.page_size == 250
        assert config.bounds == (0.001, DEFAULT_BOUNDS_HIGH)
        assert config.verify_tls is False
        assert config.fhir_format == "xml"
        assert config.enforce_threshold_order is False

    def test_invalid_numbers_fall_back(self, monkeypatch):
        """Test unparsable numbers keep their defaults."""
        monkeypatch.setenv("MDM_ADAPTER_PAGE_SIZE", "many")
        monkeypatch.setenv("MDM_ADAPTER_BOUNDS_LOW", "tiny")

        config = MatchConfigConfig.from_env()

        assert config.page_size == 1000
        assert config.bounds_low == DEFAULT_BOUNDS_LOW


class TestSingleton:
    """Test get_config / set_config / reset_config."""

    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_set_and_reset(self):
        custom = MatchConfigConfig(page_size=5)
        set_config(custom)
        assert get_config() is custom
        reset_config()
        assert get_config() is not custom
