"""
TransGate: caching, coalescing translation gateway

Sits in front of a rate-limited, billable translation provider and:

1. Serves repeated (language, text) pairs from a persistent TTL cache
2. Shares one upstream call between identical concurrent batches
3. Bounds simultaneous provider calls
4. Detects collapsed or wrong-script answers and retries them item by item

Usage:
    from transgate import TranslationGateway, GatewayConfig
    from transgate.translation.backends import OpenAIBackend

    async with TranslationGateway(OpenAIBackend(), GatewayConfig()) as gateway:
        response = await gateway.handle_request({"texts": ["Hello"], "target": "hi"})
"""

__version__ = "1.0.0"
__author__ = "TransGate Team"
__license__ = "MIT"

from transgate.core.exceptions import (
    TransGateError,
    InputValidationError,
    ConfigurationError,
    ProviderError,
    ResponseParseError,
    CacheError
)
from transgate.core.gateway import TranslationGateway, GatewayConfig, create_gateway
from transgate.core.models import TranslateOutcome, GatewayResponse
from transgate.core.validator import QualityValidator, QualityReport
from transgate.translation.base import TranslationBackend, TranslationRequest, TranslationResponse

__all__ = [
    "__version__",
    "TransGateError",
    "InputValidationError",
    "ConfigurationError",
    "ProviderError",
    "ResponseParseError",
    "CacheError",
    "TranslationGateway",
    "GatewayConfig",
    "create_gateway",
    "TranslateOutcome",
    "GatewayResponse",
    "QualityValidator",
    "QualityReport",
    "TranslationBackend",
    "TranslationRequest",
    "TranslationResponse",
]
