"""
Output cleaning utilities for LLM translations.

Clean up common LLM output artifacts:
- Remove <think>...</think> wrappers (chain-of-thought)
- Remove "Translation:" prefixes
- Remove code fence wrappers
- Remove leading/trailing quotes
- Recover the {"translations": [...]} payload from a noisy batch answer
"""

import json
import re
from typing import Any, List, Optional

from transgate.core.exceptions import ResponseParseError


_THINK_RE = re.compile(r'<think(?:ing)?>.*?</think(?:ing)?>', re.DOTALL | re.IGNORECASE)
_FENCE_RE = re.compile(r'```(?:json|JSON)?')


def clean_translation_output(text: str) -> str:
    """
    Clean a single-string LLM translation down to the translated text.

    Args:
        text: Raw LLM output

    Returns:
        Cleaned translation text (the original if cleaning removed everything)
    """
    if not text:
        return text

    original = text

    text = _THINK_RE.sub('', text)

    # Match ```language\ntext\n``` or ```\ntext\n```
    match = re.match(r'^```(?:\w+)?\s*\n(.*?)\n```\s*$', text.strip(), re.DOTALL)
    if match:
        text = match.group(1)

    text = re.sub(r'^(?:Translation|Translated text|Output|Result):\s*', '', text.strip(), flags=re.IGNORECASE)

    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ('"', "'"):
        text = text[1:-1].strip()

    if not text:
        return original

    return text


def strip_wrappers(content: str) -> str:
    """Remove reasoning blocks and code fence markers from a batch answer."""
    content = _THINK_RE.sub('', content or '')
    return _FENCE_RE.sub('', content).strip()


def _decode(candidate: str) -> Optional[Any]:
    try:
        return json.loads(candidate)
    except ValueError:
        return None


def parse_translations_payload(content: str) -> List[Any]:
    """
    Extract the ``translations`` array from a batch answer.

    Tries the cleaned content as JSON first, then the substring between the
    first ``{`` and the last ``}``. A bare JSON array is accepted as well.
    Entries are returned untouched; callers decide what counts as a string.

    Raises:
        ResponseParseError: when no translations array can be recovered
    """
    cleaned = strip_wrappers(content)
    parsed = _decode(cleaned)

    if parsed is None:
        start = cleaned.find('{')
        end = cleaned.rfind('}')
        if start != -1 and end > start:
            parsed = _decode(cleaned[start:end + 1])

    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict) and isinstance(parsed.get('translations'), list):
        return parsed['translations']

    raise ResponseParseError("Response did not include a translations array", raw=content)
