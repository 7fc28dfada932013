"""Prompt builders for batch and single-item translation calls."""

import json
from typing import List

from .base import TranslationRequest


BATCH_SYSTEM_TEMPLATE = """\
You are a translation engine. Translate each input string independently into "{target}".
Return EXACTLY a JSON object in the following format (no extra text):

{{
  "translations": ["t1", "t2", "t3", ...]
}}

Rules:
- Preserve order.
- If an item is an empty string, return an empty string for that index.
- Do NOT add commentary or explanation.
- Do NOT wrap output in markdown unless it is only a JSON block.
"""

SINGLE_SYSTEM_TEMPLATE = """\
You are a translation engine. Translate the user's text into "{target}".
Return ONLY the translated string: exactly one string, no quotes, no JSON,
no markdown, no labels, no explanation.
"""


def build_batch_request(texts: List[str], target_lang: str, max_tokens: int = 2000) -> TranslationRequest:
    """Request for the JSON-array batch call."""
    return TranslationRequest(
        texts=list(texts),
        target_lang=target_lang,
        system_prompt=BATCH_SYSTEM_TEMPLATE.format(target=target_lang),
        user_prompt=f"Translate this JSON array of strings:\n{json.dumps(texts, ensure_ascii=False)}",
        max_tokens=max_tokens
    )


def build_single_request(text: str, target_lang: str, max_tokens: int = 2000) -> TranslationRequest:
    """Stricter request used by per-item retries."""
    return TranslationRequest(
        texts=[text],
        target_lang=target_lang,
        system_prompt=SINGLE_SYSTEM_TEMPLATE.format(target=target_lang),
        user_prompt=text,
        max_tokens=max_tokens,
        kind="single"
    )
