# -*- coding: utf-8 -*-
"""
Translation gateway: cache, coalescing, concurrency limit and quality retries.

One upstream call is made per distinct set of cache misses, shared by every
concurrent caller asking for the same set. Provider failures never reach the
caller: each item falls back to its original text so the output always has the
same length and order as the input.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set

from transgate.core.exceptions import (
    ConfigurationError,
    InputValidationError,
    ProviderError,
    ResponseParseError,
)
from transgate.core.models import GatewayResponse, TranslateOutcome
from transgate.core.validator import QualityReport, QualityValidator
from transgate.translation.base import TranslationBackend, TranslationRequest, TranslationResponse
from transgate.translation.output_cleaner import clean_translation_output, parse_translations_payload
from transgate.translation.prompts import build_batch_request, build_single_request
from transgate.utils.cache import PersistentTranslationCache
from transgate.utils.concurrency import ConcurrencyLimiter, SingleFlight

logger = logging.getLogger(__name__)


@dataclass
class GatewayConfig:
    """Gateway tuning knobs."""
    max_concurrent: int = 4
    max_retry_batch: int = 50
    provider_timeout: Optional[float] = 60.0
    max_tokens: int = 2000
    cache_path: str = ".cache/translations.json"
    cache_ttl_days: float = 30
    default_target: str = "en"

    def __post_init__(self):
        if self.max_concurrent < 1:
            raise ConfigurationError(
                f"max_concurrent must be >= 1, got {self.max_concurrent}",
                config_key="gateway.max_concurrent",
                invalid_value=self.max_concurrent
            )
        if self.max_retry_batch < 0:
            raise ConfigurationError(
                f"max_retry_batch must be >= 0, got {self.max_retry_batch}",
                config_key="gateway.max_retry_batch",
                invalid_value=self.max_retry_batch
            )
        if self.provider_timeout is not None and self.provider_timeout <= 0:
            raise ConfigurationError(
                f"provider timeout must be positive, got {self.provider_timeout}",
                config_key="provider.timeout",
                invalid_value=self.provider_timeout
            )
        if self.cache_ttl_days <= 0:
            raise ConfigurationError(
                f"cache ttl must be positive, got {self.cache_ttl_days}",
                config_key="cache.ttl_days",
                invalid_value=self.cache_ttl_days
            )

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "GatewayConfig":
        """Build from the nested dictionary returned by ``load_config``."""
        provider = config.get("provider", {}) or {}
        gateway = config.get("gateway", {}) or {}
        cache = config.get("cache", {}) or {}

        def _num(section: str, key: str, value: Any, kind):
            try:
                return kind(value)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Invalid value for {section}.{key}: {value!r}",
                    config_key=f"{section}.{key}",
                    invalid_value=value
                )

        timeout = provider.get("timeout", 60.0)
        return cls(
            max_concurrent=_num("gateway", "max_concurrent", gateway.get("max_concurrent", 4), int),
            max_retry_batch=_num("gateway", "max_retry_batch", gateway.get("max_retry_batch", 50), int),
            provider_timeout=None if timeout is None else _num("provider", "timeout", timeout, float),
            max_tokens=_num("provider", "max_tokens", provider.get("max_tokens", 2000), int),
            cache_path=str(cache.get("path", ".cache/translations.json")),
            cache_ttl_days=_num("cache", "ttl_days", cache.get("ttl_days", 30), float),
            default_target=str(gateway.get("default_target", "en")),
        )


@dataclass
class _BatchResult:
    translations: List[str]
    fallback: bool = False


class TranslationGateway:
    """
    Batch translation front for a rate-limited provider.

    Construct once per process and share it between request handlers:

        async with TranslationGateway(OpenAIBackend(), GatewayConfig()) as gateway:
            outcome = await gateway.translate_batch(["Hello"], "hi")
    """

    def __init__(
        self,
        backend: TranslationBackend,
        config: Optional[GatewayConfig] = None,
        cache: Optional[PersistentTranslationCache] = None,
        validator: Optional[QualityValidator] = None
    ):
        self.config = config or GatewayConfig()
        self.backend = backend
        self.cache = cache or PersistentTranslationCache(
            self.config.cache_path,
            ttl_days=self.config.cache_ttl_days
        )
        self.limiter = ConcurrencyLimiter(self.config.max_concurrent)
        self.inflight = SingleFlight()
        self.validator = validator or QualityValidator()
        self._background: Set[asyncio.Task] = set()

        self.stats = {
            "requests": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "upstream_calls": 0,
            "coalesced": 0,
            "provider_errors": 0,
            "parse_errors": 0,
            "shape_mismatches": 0,
            "suspicious_batches": 0,
            "retried_items": 0,
            "large_batch_fallbacks": 0,
        }

    # ------------------------------------------------------------------ lifecycle

    async def start(self) -> None:
        """Load the persisted cache."""
        self.cache.load()

    async def drain(self) -> None:
        """Wait for scheduled cache flushes to finish."""
        while self._background:
            await asyncio.gather(*list(self._background))

    async def aclose(self) -> None:
        """Finish background work and persist the cache one last time."""
        await self.drain()
        await self.cache.flush()

    async def __aenter__(self) -> "TranslationGateway":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ inbound

    def _parse_payload(self, payload: Any):
        if not isinstance(payload, dict):
            raise InputValidationError("request body must be a JSON object", field="body")

        texts = payload.get("texts")
        if not isinstance(texts, list) or not texts or not all(isinstance(t, str) for t in texts):
            raise InputValidationError("texts must be a non-empty array of strings", field="texts")

        target = payload.get("target", payload.get("targetLanguage"))
        if not isinstance(target, str) or not target.strip():
            target = self.config.default_target
        return texts, target.strip()

    async def handle_request(self, payload: Any) -> GatewayResponse:
        """
        Answer an inbound ``{"texts": [...], "target": "hi"}`` request.

        Returns:
            400 for malformed input, 500 when the provider is not configured,
            500 with the original texts for unexpected failures, 200 otherwise
        """
        try:
            texts, target = self._parse_payload(payload)
        except InputValidationError as e:
            return GatewayResponse(400, {"error": e.message})

        try:
            outcome = await self.translate_batch(texts, target)
        except ConfigurationError as e:
            logger.error(f"Rejecting translate request: {e.message}")
            return GatewayResponse(500, {"error": "Translation provider not configured"})
        except Exception:
            logger.exception("Translation request failed")
            return GatewayResponse(500, {"error": "Translation failed", "translations": list(texts)})

        return GatewayResponse(200, outcome.to_dict())

    # ------------------------------------------------------------------ orchestration

    async def translate_batch(self, texts: Sequence[str], target_lang: str) -> TranslateOutcome:
        """
        Translate ``texts`` into ``target_lang``.

        Args:
            texts: Non-empty list of source strings
            target_lang: Target language code

        Returns:
            TranslateOutcome whose translations align with ``texts``

        Raises:
            InputValidationError: if texts is empty
            ConfigurationError: if the provider has no credentials
        """
        if not texts:
            raise InputValidationError("texts must be a non-empty array of strings", field="texts")
        if not self.backend.is_available():
            raise ConfigurationError(
                f"Provider '{self.backend.name}' has no API key",
                config_key="provider.api_key"
            )

        texts = list(texts)
        self.stats["requests"] += 1

        results: List[Optional[str]] = [None] * len(texts)
        missing_indices: List[int] = []
        for idx, text in enumerate(texts):
            cached = self._cache_get(target_lang, text)
            if cached is not None:
                results[idx] = cached
            else:
                missing_indices.append(idx)

        cache_hits = len(texts) - len(missing_indices)
        self.stats["cache_hits"] += cache_hits
        self.stats["cache_misses"] += len(missing_indices)

        if not missing_indices:
            logger.debug(f"All {len(texts)} texts served from cache ({target_lang})")
            return TranslateOutcome(translations=results, cache_hits=cache_hits)

        missing = [texts[idx] for idx in missing_indices]
        key = SingleFlight.make_key(target_lang, missing)
        if self.inflight.is_pending(key):
            self.stats["coalesced"] += 1

        try:
            batch = await self.inflight.get_or_start(
                key, lambda: self._fetch_batch(missing, target_lang)
            )
        except Exception:
            logger.exception(f"Batch translation of {len(missing)} texts failed unexpectedly")
            batch = _BatchResult(list(missing), fallback=True)

        for idx, translation in zip(missing_indices, batch.translations):
            results[idx] = translation

        outcome = TranslateOutcome(
            translations=results,
            cache_hits=cache_hits,
            fallback=batch.fallback
        )

        report = self.validator.check(texts, results, target_lang)
        outcome.quality = report
        if report.suspicious:
            self.stats["suspicious_batches"] += 1
            await self._handle_suspicious(texts, target_lang, report, outcome)

        return outcome

    async def _call_provider(self, request: TranslationRequest) -> TranslationResponse:
        """One upstream call, holding a limiter slot for its whole duration."""
        async with self.limiter.slot():
            self.stats["upstream_calls"] += 1
            try:
                if self.config.provider_timeout is None:
                    return await self.backend.translate(request)
                return await asyncio.wait_for(
                    self.backend.translate(request),
                    self.config.provider_timeout
                )
            except asyncio.TimeoutError as e:
                raise ProviderError(
                    self.backend.name,
                    f"timed out after {self.config.provider_timeout}s",
                    original_error=e
                ) from e

    async def _fetch_batch(self, missing: List[str], target_lang: str) -> _BatchResult:
        """Shared upstream call for one miss set, reconciled against ``missing``."""
        request = build_batch_request(missing, target_lang, max_tokens=self.config.max_tokens)
        try:
            response = await self._call_provider(request)
        except ProviderError as e:
            self.stats["provider_errors"] += 1
            logger.warning(f"{e.message}; returning {len(missing)} original texts")
            return _BatchResult(list(missing), fallback=True)

        try:
            items = parse_translations_payload(response.content)
        except ResponseParseError as e:
            self.stats["parse_errors"] += 1
            logger.warning(f"{e.message}; returning {len(missing)} original texts. Raw: {response.content[:200]!r}")
            return _BatchResult(list(missing), fallback=True)

        if len(items) != len(missing):
            self.stats["shape_mismatches"] += 1
            logger.warning(f"Provider returned {len(items)} translations for {len(missing)} texts; mapping by position")
            fixed = [
                items[i] if i < len(items) and isinstance(items[i], str) else text
                for i, text in enumerate(missing)
            ]
            return _BatchResult(fixed, fallback=True)

        translations: List[str] = []
        fallback = False
        for text, item in zip(missing, items):
            if isinstance(item, str):
                translations.append(item)
                self._cache_put(target_lang, text, item)
            else:
                translations.append(text)
                fallback = True

        self._schedule_flush()
        return _BatchResult(translations, fallback)

    # ------------------------------------------------------------------ quality retries

    async def _handle_suspicious(
        self,
        texts: List[str],
        target_lang: str,
        report: QualityReport,
        outcome: TranslateOutcome
    ) -> None:
        if len(texts) > self.config.max_retry_batch:
            self.stats["large_batch_fallbacks"] += 1
            logger.warning(
                f"Suspicious batch of {len(texts)} exceeds retry limit "
                f"{self.config.max_retry_batch}; returning original texts"
            )
            outcome.translations = list(texts)
            outcome.fallback = True
            if self._evict(target_lang, [texts[idx] for idx in self._flagged(report, len(texts))]):
                self._schedule_flush()
            return

        translations, retried, fallback = await self._retry_items(
            texts, outcome.translations, target_lang, report
        )
        outcome.translations = translations
        outcome.retried_indices = retried
        outcome.fallback = outcome.fallback or fallback

    async def _retry_items(
        self,
        texts: List[str],
        translations: List[str],
        target_lang: str,
        report: QualityReport
    ):
        """Re-translate flagged items one at a time through the limiter."""
        updated = list(translations)
        retried: List[int] = []
        rejected: List[str] = []
        fallback = False
        accepted: Set[str] = set()

        for idx in self._flagged(report, len(texts)):
            text = texts[idx]
            if not text.strip():
                updated[idx] = text
                rejected.append(text)
                continue

            retried.append(idx)
            self.stats["retried_items"] += 1
            request = build_single_request(text, target_lang, max_tokens=self.config.max_tokens)
            try:
                response = await self._call_provider(request)
                translated = clean_translation_output(response.content or "")
            except ProviderError as e:
                self.stats["provider_errors"] += 1
                logger.warning(f"Retry for item {idx} failed: {e.message}")
                translated = ""
            except Exception:
                logger.exception(f"Retry for item {idx} failed unexpectedly")
                translated = ""

            if translated:
                updated[idx] = translated
                self._cache_put(target_lang, text, translated)
                accepted.add(text)
            else:
                updated[idx] = text
                rejected.append(text)
                fallback = True

        # flagged batch output must not be served from cache later
        if self._evict(target_lang, [t for t in rejected if t not in accepted]) or accepted:
            self._schedule_flush()
        logger.info(f"Retried {len(retried)} of {len(texts)} items for '{target_lang}'")
        return updated, retried, fallback

    # ------------------------------------------------------------------ cache helpers

    def _cache_get(self, target_lang: str, text: str) -> Optional[str]:
        try:
            return self.cache.get(target_lang, text)
        except Exception:
            logger.exception("Cache lookup failed; treating as a miss")
            return None

    def _cache_put(self, target_lang: str, text: str, value: str) -> None:
        try:
            self.cache.put(target_lang, text, value)
        except Exception:
            logger.exception("Cache write failed; continuing without caching")

    def _evict(self, target_lang: str, texts: List[str]) -> int:
        removed = 0
        for text in texts:
            try:
                removed += self.cache.discard(target_lang, text)
            except Exception:
                logger.exception("Cache eviction failed")
        if removed:
            logger.debug(f"Evicted {removed} rejected translations ({target_lang})")
        return removed

    @staticmethod
    def _flagged(report: QualityReport, total: int) -> List[int]:
        if report.collapsed:
            return list(range(total))
        return sorted(set(report.mismatched_indices))

    def _schedule_flush(self) -> None:
        task = asyncio.ensure_future(self.cache.flush())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def get_stats(self) -> Dict[str, Any]:
        """Get gateway statistics."""
        stats: Dict[str, Any] = dict(self.stats)
        stats["limiter"] = self.limiter.get_stats()
        stats["inflight"] = self.inflight.get_stats()
        stats["cache"] = self.cache.get_stats()
        stats["backend"] = self.backend.get_info()
        return stats


def create_gateway(config: Dict[str, Any]) -> TranslationGateway:
    """Build a gateway and its OpenAI provider from a ``load_config`` dictionary."""
    from transgate.translation.backends import OpenAIBackend

    gateway_config = GatewayConfig.from_dict(config)
    provider = config.get("provider", {}) or {}
    backend_name = provider.get("backend", "openai")
    if backend_name != "openai":
        raise ConfigurationError(
            f"Unknown provider backend: {backend_name}",
            config_key="provider.backend",
            invalid_value=backend_name,
            valid_values=["openai"]
        )

    backend = OpenAIBackend(
        api_key=provider.get("api_key") or None,
        model=provider.get("model") or None,
        timeout=gateway_config.provider_timeout or 60.0,
        base_url=provider.get("base_url") or None
    )
    return TranslationGateway(backend, gateway_config)
