"""Tests for configuration and request models."""

from dataclasses import FrozenInstanceError, replace

import pytest
from pearflag.config import ClientConfig, validate_api_key, validate_base_url
from pearflag.errors import ConfigurationError, ResponseFormatError
from pearflag.models import EvaluationRequest, FlagEvaluation, User, parse_evaluations

API_KEY = "0da8f357ce7a2b01effe5992f295a592"


class TestValidators:
    """Tests for validation helpers."""

    @pytest.mark.parametrize(
        "url",
        ["https://api.example.com", "http://localhost:5173", "https://flags.example.com/base/"],
    )
    def test_valid_base_urls(self, url):
        assert validate_base_url(url)

    @pytest.mark.parametrize("url", ["invalid-url", "", "/api/v1", None])
    def test_invalid_base_urls(self, url):
        assert not validate_base_url(url)

    def test_api_key(self):
        assert validate_api_key(API_KEY)
        assert not validate_api_key(API_KEY + "0")
        assert not validate_api_key(None)


class TestClientConfig:
    """Tests for ClientConfig class."""

    def test_defaults(self):
        config = ClientConfig(api_key=API_KEY)

        assert config.timeout_ms == 5000
        assert config.custom_headers == {}
        assert config.debug is False
        assert config.retry.retries == 3
        assert config.retry.delay_ms == 1000
        assert config.cache_ttl_ms == 0

    def test_is_immutable(self):
        config = ClientConfig(api_key=API_KEY)
        with pytest.raises(FrozenInstanceError):
            config.debug = True

    def test_replace_validates(self):
        config = ClientConfig(api_key=API_KEY)
        with pytest.raises(ConfigurationError, match="Invalid base URL: nope"):
            replace(config, base_url="nope")

    def test_negative_ttl(self):
        with pytest.raises(ConfigurationError):
            ClientConfig(api_key=API_KEY, cache_ttl_ms=-1)

    @pytest.mark.parametrize("timeout_ms", [None, "5000", 0])
    def test_invalid_timeout_type(self, timeout_ms):
        """Non-numeric timeouts are configuration errors, not TypeErrors."""
        with pytest.raises(ConfigurationError, match="Timeout must be > 0"):
            ClientConfig(api_key=API_KEY, timeout_ms=timeout_ms)

    @pytest.mark.parametrize("ttl_ms", [None, "100"])
    def test_invalid_ttl_type(self, ttl_ms):
        with pytest.raises(ConfigurationError, match="Cache TTL must be >= 0"):
            ClientConfig(api_key=API_KEY, cache_ttl_ms=ttl_ms)


class TestModels:
    """Tests for request and result models."""

    def test_request_to_dict_omits_unset_fields(self):
        request = EvaluationRequest(environment="production", user=User(id="user1"))
        assert request.to_dict() == {"environment": "production", "user": {"id": "user1"}}

    def test_request_to_dict_includes_flag_and_email(self):
        request = EvaluationRequest(
            environment="production",
            user=User(id="user1", email="user1@example.com"),
            flag="feature1",
        )
        assert request.to_dict() == {
            "environment": "production",
            "user": {"id": "user1", "email": "user1@example.com"},
            "flag": "feature1",
        }

    def test_flag_evaluation_from_dict(self):
        assert FlagEvaluation.from_dict({"flag": "a", "enabled": False}) == FlagEvaluation("a", False)

    @pytest.mark.parametrize("data", [None, "a", {"flag": 1, "enabled": True}, {"flag": "a", "enabled": 1}])
    def test_flag_evaluation_rejects_malformed(self, data):
        with pytest.raises(ResponseFormatError):
            FlagEvaluation.from_dict(data)

    def test_parse_evaluations_requires_list(self):
        with pytest.raises(ResponseFormatError):
            parse_evaluations({"flag": "a", "enabled": True})
