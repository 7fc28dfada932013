"""Request and result models for the translation gateway."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from transgate.core.validator import QualityReport


@dataclass
class TranslateOutcome:
    """Result of one batch translation, aligned with the input texts."""
    translations: List[str]
    cache_hits: int = 0
    quality: Optional[QualityReport] = None
    retried_indices: List[int] = field(default_factory=list)
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"translations": list(self.translations)}


@dataclass
class GatewayResponse:
    """Transport-agnostic reply to an inbound translate request."""
    status_code: int
    body: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
