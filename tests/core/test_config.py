"""Tests for environment driven configuration."""

import pytest

from instantly_mcp.core.config import DEFAULT_BASE_URL, HttpConfig, InstantlyConfig, load_config_from_env
from instantly_mcp.core.exceptions import ConfigurationError
from instantly_mcp.core.patterns import RetryPolicy

KEY = "sk-live-abcdefghij1234"


class TestLoadConfigFromEnv:
    """Test loading configuration from a mapping of environment variables."""

    def test_defaults(self):
        config = load_config_from_env({"INSTANTLY_API_KEY": KEY})

        assert config.api_key == KEY
        assert config.http.base_url == DEFAULT_BASE_URL
        assert config.http.timeout == 30.0
        assert config.retry == RetryPolicy()
        assert config.log_level == "INFO"

    def test_all_overrides(self):
        config = load_config_from_env(
            {
                "INSTANTLY_API_KEY": KEY,
                "INSTANTLY_API_URL": "http://localhost:8080/api/v2",
                "INSTANTLY_RETRY_MAX_ATTEMPTS": "5",
                "INSTANTLY_RETRY_INITIAL_DELAY": "250",
                "INSTANTLY_RETRY_MAX_DELAY": "4000",
                "INSTANTLY_RETRY_BACKOFF_FACTOR": "1.5",
                "INSTANTLY_HTTP_TIMEOUT": "12.5",
                "INSTANTLY_LOG_LEVEL": "debug",
            }
        )

        assert config.http.base_url == "http://localhost:8080/api/v2"
        assert config.http.timeout == 12.5
        assert config.retry == RetryPolicy(max_attempts=5, initial_delay_ms=250, max_delay_ms=4000, backoff_factor=1.5)
        assert config.log_level == "DEBUG"

    def test_blank_values_use_defaults(self):
        config = load_config_from_env({"INSTANTLY_API_KEY": KEY, "INSTANTLY_RETRY_MAX_ATTEMPTS": "  "})
        assert config.retry.max_attempts == 3

    @pytest.mark.parametrize("environ", [{}, {"INSTANTLY_API_KEY": ""}, {"INSTANTLY_API_KEY": "   "}])
    def test_missing_api_key(self, environ):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env(environ)

        assert "INSTANTLY_API_KEY" in exc_info.value.message
        assert exc_info.value.setting == "INSTANTLY_API_KEY"

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("INSTANTLY_RETRY_MAX_ATTEMPTS", "three"),
            ("INSTANTLY_RETRY_MAX_ATTEMPTS", "2.5"),
            ("INSTANTLY_RETRY_INITIAL_DELAY", "1s"),
            ("INSTANTLY_RETRY_BACKOFF_FACTOR", "fast"),
            ("INSTANTLY_HTTP_TIMEOUT", "forever"),
        ],
    )
    def test_unparseable_values(self, name, value):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env({"INSTANTLY_API_KEY": KEY, name: value})

        assert exc_info.value.setting == name
        assert name in exc_info.value.message

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("INSTANTLY_RETRY_MAX_ATTEMPTS", "0"),
            ("INSTANTLY_RETRY_INITIAL_DELAY", "-5"),
            ("INSTANTLY_RETRY_BACKOFF_FACTOR", "0.5"),
            ("INSTANTLY_RETRY_BACKOFF_FACTOR", "nan"),
            ("INSTANTLY_RETRY_BACKOFF_FACTOR", "inf"),
            ("INSTANTLY_HTTP_TIMEOUT", "nan"),
            ("INSTANTLY_HTTP_TIMEOUT", "inf"),
            ("INSTANTLY_HTTP_TIMEOUT", "0"),
        ],
    )
    def test_policy_violations_name_the_variable(self, name, value):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env({"INSTANTLY_API_KEY": KEY, name: value})

        assert exc_info.value.setting == name

    def test_max_delay_below_initial(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env(
                {
                    "INSTANTLY_API_KEY": KEY,
                    "INSTANTLY_RETRY_INITIAL_DELAY": "5000",
                    "INSTANTLY_RETRY_MAX_DELAY": "1000",
                }
            )

        assert exc_info.value.setting == "INSTANTLY_RETRY_MAX_DELAY"

    def test_unknown_log_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_env({"INSTANTLY_API_KEY": KEY, "INSTANTLY_LOG_LEVEL": "chatty"})

        assert exc_info.value.setting == "INSTANTLY_LOG_LEVEL"

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("INSTANTLY_API_KEY", KEY)
        monkeypatch.setenv("INSTANTLY_RETRY_MAX_ATTEMPTS", "7")

        config = InstantlyConfig.from_env()

        assert config.retry.max_attempts == 7


class TestHttpConfig:
    """Test HttpConfig validation."""

    @pytest.mark.parametrize("url", ["", "ftp://api.instantly.ai", "api.instantly.ai/api/v2"])
    def test_invalid_base_url(self, url):
        with pytest.raises(ConfigurationError) as exc_info:
            HttpConfig(base_url=url)
        assert exc_info.value.setting == "INSTANTLY_API_URL"

    @pytest.mark.parametrize("timeout", [0, -1.0, float("nan"), float("inf")])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ConfigurationError):
            HttpConfig(timeout=timeout)


class TestSecretHandling:
    """The API key must stay out of any printable form."""

    def test_repr_hides_key(self):
        config = InstantlyConfig(api_key=KEY)
        assert KEY not in repr(config)

    def test_masked_key_keeps_last_four(self):
        config = InstantlyConfig(api_key=KEY)
        assert config.masked_api_key == "*" * (len(KEY) - 4) + "1234"

    def test_short_key_fully_masked(self):
        assert InstantlyConfig(api_key="abcd").masked_api_key == "****"

    def test_to_dict_masks_key(self):
        data = InstantlyConfig(api_key=KEY).to_dict()

        assert data["api_key"].endswith("1234")
        assert KEY not in str(data)
        assert data["retry"]["max_attempts"] == 3
        assert data["http"]["base_url"] == DEFAULT_BASE_URL
