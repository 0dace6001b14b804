"""Value types produced by the FAQ synthesizer."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum


class FAQStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass(frozen=True)
class FAQItem:
    """One generated question/answer pair (both non-empty and trimmed)."""

    question: str
    answer: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
