# -*- coding: utf-8 -*-
"""
Batch quality validator.

Flags provider answers that came back "successfully" but cannot be trusted:
1. Collapse: several distinct inputs mapped to one identical output
2. Wrong script: outputs written in a different script than the target language uses
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging
import re

logger = logging.getLogger(__name__)


# Detection order matters: first matching script wins
SCRIPT_PATTERNS: Tuple[Tuple[str, "re.Pattern"], ...] = (
    ("devanagari", re.compile(r"[\u0900-\u097F]")),
    ("bengali", re.compile(r"[\u0980-\u09FF]")),
    ("oriya", re.compile(r"[\u0B00-\u0B7F]")),
    ("tamil", re.compile(r"[\u0B80-\u0BFF]")),
    ("malayalam", re.compile(r"[\u0D00-\u0D7F]")),
    ("telugu", re.compile(r"[\u0C00-\u0C7F]")),
    ("kannada", re.compile(r"[\u0C80-\u0CFF]")),
    ("latin", re.compile(r"[A-Za-z\u00C0-\u024F]")),
)

LANGUAGE_SCRIPTS = {
    "hi": "devanagari",
    "mr": "devanagari",
    "ne": "devanagari",
    "sa": "devanagari",
    "bn": "bengali",
    "as": "bengali",
    "ta": "tamil",
    "ml": "malayalam",
    "te": "telugu",
    "kn": "kannada",
    "or": "oriya",
    "od": "oriya",
}


def base_language(lang: str) -> str:
    """'hi-IN' / 'hi_IN' / 'HI' -> 'hi'."""
    return re.split(r"[-_]", (lang or "").strip(), maxsplit=1)[0].lower()


def script_for(lang: str) -> Optional[str]:
    """Expected script for a target language, or None when unconstrained."""
    return LANGUAGE_SCRIPTS.get(base_language(lang))


def detect_script(text: str) -> Optional[str]:
    """Dominant script of ``text`` by ordered range test, None if nothing matches."""
    if not text:
        return None
    for name, pattern in SCRIPT_PATTERNS:
        if pattern.search(text):
            return name
    return None


@dataclass
class QualityReport:
    """Outcome of a batch quality check."""
    collapsed: bool = False
    many_script_problems: bool = False
    mismatched_indices: List[int] = field(default_factory=list)
    expected_script: Optional[str] = None
    mismatch_count: int = 0
    total: int = 0

    @property
    def suspicious(self) -> bool:
        return self.collapsed or self.many_script_problems


class QualityValidator:
    """
    Classifies a completed batch as suspicious.

    The check is a pure function of inputs, outputs and target language.
    """

    def __init__(self, mismatch_ratio: float = 0.25, min_mismatches: int = 1):
        self.mismatch_ratio = mismatch_ratio
        self.min_mismatches = min_mismatches

    def check(
        self,
        inputs: Sequence[str],
        outputs: Sequence[str],
        target_lang: str
    ) -> QualityReport:
        """
        Validate one batch.

        Args:
            inputs: Source texts, in request order
            outputs: Translations, same length and order as inputs
            target_lang: Target language code

        Returns:
            QualityReport with the collapse/script flags and mismatched indices
        """
        total = len(outputs)
        report = QualityReport(total=total, expected_script=script_for(target_lang))

        unique_outputs = {(o or "").strip() for o in outputs}
        unique_inputs = {(i or "").strip() for i in inputs}
        report.collapsed = len(unique_outputs) == 1 and len(unique_inputs) > 1

        if report.expected_script:
            for idx, output in enumerate(outputs):
                detected = detect_script(output)
                if detected is not None and detected != report.expected_script:
                    report.mismatched_indices.append(idx)
            report.mismatch_count = len(report.mismatched_indices)

        threshold = max(self.min_mismatches, self.mismatch_ratio * total)
        report.many_script_problems = report.mismatch_count > threshold

        if report.suspicious:
            logger.warning(
                f"Suspicious batch for '{target_lang}': collapsed={report.collapsed}, "
                f"script mismatches={report.mismatch_count}/{total}"
            )
        return report
