"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from transgate.core.gateway import GatewayConfig, TranslationGateway


@pytest.fixture
def cache_path(tmp_path):
    """Backing file for the persistent cache."""
    return tmp_path / "translations.json"


@pytest.fixture
def make_gateway(cache_path):
    """Factory building an isolated gateway around a backend."""
    def _make(backend, **overrides):
        overrides.setdefault("cache_path", str(cache_path))
        return TranslationGateway(backend, GatewayConfig(**overrides))
    return _make
