"""
Tests for configuration loading and GatewayConfig validation.
"""

import pytest

from transgate.core.exceptions import ConfigurationError
from transgate.core.gateway import GatewayConfig, create_gateway
from transgate.utils.config_loader import get_default_config, load_config, save_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in [
        "OPENAI_API_KEY", "OPENAI_MODEL", "TRANSGATE_PROVIDER_TIMEOUT",
        "TRANSGATE_MAX_CONCURRENT", "TRANSGATE_MAX_RETRY_BATCH",
        "TRANSGATE_CACHE_PATH", "TRANSGATE_CACHE_TTL_DAYS",
    ]:
        monkeypatch.delenv(var, raising=False)


def test_defaults_match_documented_limits():
    config = GatewayConfig.from_dict(get_default_config())
    assert config.max_concurrent == 4
    assert config.max_retry_batch == 50
    assert config.cache_ttl_days == 30
    assert config.default_target == "en"


def test_yaml_values_merge_over_defaults(tmp_path):
    path = tmp_path / "gateway.yaml"
    save_config({"gateway": {"max_concurrent": 2}, "cache": {"path": "/tmp/x.json"}}, str(path))

    config = load_config(str(path))

    assert config["gateway"]["max_concurrent"] == 2
    assert config["gateway"]["max_retry_batch"] == 50
    assert config["cache"]["path"] == "/tmp/x.json"
    assert config["cache"]["ttl_days"] == 30


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "gateway.yaml"
    save_config({"gateway": {"max_concurrent": 2}}, str(path))
    monkeypatch.setenv("TRANSGATE_MAX_CONCURRENT", "8")
    monkeypatch.setenv("TRANSGATE_CACHE_TTL_DAYS", "7")

    config = GatewayConfig.from_dict(load_config(str(path)))

    assert config.max_concurrent == 8
    assert config.cache_ttl_days == 7.0


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_numeric_value_is_configuration_error():
    config = get_default_config()
    config["gateway"]["max_concurrent"] = "many"
    with pytest.raises(ConfigurationError) as exc_info:
        GatewayConfig.from_dict(config)
    assert exc_info.value.config_key == "gateway.max_concurrent"


@pytest.mark.parametrize("kwargs", [
    {"max_concurrent": 0},
    {"max_retry_batch": -1},
    {"provider_timeout": 0},
    {"cache_ttl_days": 0},
])
def test_invalid_limits_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        GatewayConfig(**kwargs)


def test_create_gateway_builds_openai_backend(tmp_path):
    config = get_default_config()
    config["provider"]["api_key"] = "sk-test"
    config["cache"]["path"] = str(tmp_path / "c.json")

    gateway = create_gateway(config)

    assert gateway.backend.is_available()
    assert gateway.backend.model == "gpt-4o-mini"
    assert gateway.limiter.capacity == 4


def test_create_gateway_rejects_unknown_backend():
    config = get_default_config()
    config["provider"]["backend"] = "carrier-pigeon"
    with pytest.raises(ConfigurationError):
        create_gateway(config)
