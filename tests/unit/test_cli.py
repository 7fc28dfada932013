"""
Tests for the command-line interface.
"""

import json
import logging

import pytest
from loguru import logger as loguru_logger
from typer.testing import CliRunner

from cli.commands import main as cli_main
from transgate.core.gateway import GatewayConfig, TranslationGateway
from transgate.utils.cache import PersistentTranslationCache
from transgate.utils.config_loader import load_config, save_config
from tests.fixtures.fake_backend import FakeBackend

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for var in ["TRANSGATE_CACHE_PATH", "TRANSGATE_MAX_CONCURRENT", "OPENAI_MODEL", "OPENAI_API_KEY"]:
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "gateway.yaml"
    save_config({"cache": {"path": str(tmp_path / "cache.json")}}, str(path))
    yield path
    root = logging.getLogger("transgate")
    root.handlers = []
    root.propagate = True
    root.setLevel(logging.NOTSET)
    loguru_logger.remove()


def test_translate_prints_json(config_file, tmp_path, monkeypatch):
    backend = FakeBackend()
    monkeypatch.setattr(
        cli_main,
        "create_gateway",
        lambda config: TranslationGateway(backend, GatewayConfig(cache_path=str(tmp_path / "cache.json")))
    )

    result = runner.invoke(cli_main.app, ["translate", "Hello", "World", "-t", "hi", "--json", "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "hi:Hello" in result.output
    assert [r.texts for r in backend.requests] == [["Hello", "World"]]


def test_translate_without_credentials_fails(config_file, tmp_path, monkeypatch):
    monkeypatch.setattr(
        cli_main,
        "create_gateway",
        lambda config: TranslationGateway(FakeBackend(api_key=None), GatewayConfig(cache_path=str(tmp_path / "c.json")))
    )

    result = runner.invoke(cli_main.app, ["translate", "Hello", "-c", str(config_file)])

    assert result.exit_code == 1
    assert "not configured" in result.output


def test_cache_stats_and_clear(config_file, tmp_path):
    (tmp_path / "cache.json").write_text(
        json.dumps({PersistentTranslationCache.make_key("fr", "apple"): {"value": "pomme", "createdAt": 4102444800}}),
        encoding="utf-8"
    )

    stats = runner.invoke(cli_main.app, ["cache", "stats", "-c", str(config_file)])
    assert stats.exit_code == 0, stats.output
    assert "size" in stats.output

    cleared = runner.invoke(cli_main.app, ["cache", "clear", "-c", str(config_file)])
    assert cleared.exit_code == 0, cleared.output
    assert json.loads((tmp_path / "cache.json").read_text(encoding="utf-8")) == {}


def test_cache_unknown_action(config_file):
    result = runner.invoke(cli_main.app, ["cache", "shred", "-c", str(config_file)])
    assert result.exit_code == 1


def test_init_config_writes_loadable_defaults(config_file, tmp_path):
    target = tmp_path / "configs" / "local.yaml"

    result = runner.invoke(cli_main.app, ["init-config", str(target)])
    assert result.exit_code == 0, result.output

    config = load_config(str(target))
    assert config["gateway"]["max_concurrent"] == 4
    assert config["cache"]["ttl_days"] == 30

    again = runner.invoke(cli_main.app, ["init-config", str(target)])
    assert again.exit_code == 1
    forced = runner.invoke(cli_main.app, ["init-config", str(target), "--force"])
    assert forced.exit_code == 0, forced.output


def test_info_reports_provider(config_file, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    result = runner.invoke(cli_main.app, ["info", "-c", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "OpenAIBackend" in result.output
    assert "Max concurrent calls: 4" in result.output
