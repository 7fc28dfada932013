"""OpenAI chat-completions translation provider."""

import logging
import os
import time
from typing import Optional

from openai import AsyncOpenAI, APIError, APIStatusError

from transgate.core.exceptions import ProviderError
from ..base import TranslationBackend, TranslationRequest, TranslationResponse

logger = logging.getLogger(__name__)


class OpenAIBackend(TranslationBackend):
    """OpenAI GPT-based translation provider."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 60.0,
        base_url: Optional[str] = None
    ):
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        model = model or os.getenv("OPENAI_MODEL") or self.DEFAULT_MODEL
        super().__init__(api_key, model)

        if self.api_key:
            # The provider bills every call, so the SDK must not resend on its own
            self.async_client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0
            )
        else:
            self.async_client = None

    def _build_messages(self, request: TranslationRequest):
        return [
            {"role": "system", "content": request.system_prompt},
            {"role": "user", "content": request.user_prompt},
        ]

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        """Translate asynchronously."""
        if not self.async_client:
            raise ProviderError("openai", "API key not configured")

        start_time = time.time()
        try:
            response = await self.async_client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(request),
                temperature=request.temperature,
                max_tokens=request.max_tokens
            )
        except APIStatusError as e:
            logger.error(f"OpenAI returned {e.status_code} for {len(request.texts)} texts -> {request.target_lang}")
            raise ProviderError("openai", str(e), original_error=e, status_code=e.status_code) from e
        except APIError as e:
            logger.error(f"OpenAI request failed: {type(e).__name__}: {e}")
            raise ProviderError("openai", str(e), original_error=e) from e

        if not response.choices:
            raise ProviderError("openai", "Response contained no choices")

        content = response.choices[0].message.content or ""
        tokens_used = response.usage.total_tokens if response.usage else 0

        return TranslationResponse(
            content=content,
            backend="openai",
            model=self.model,
            tokens_used=tokens_used,
            latency=time.time() - start_time,
            metadata={
                "finish_reason": response.choices[0].finish_reason,
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
            }
        )
