"""Turn raw generator output into validated :class:`FAQItem` lists.

Decoding is an ordered chain of strategies, each a plain function taking the
fence-stripped text and returning a list of candidate items or ``None`` when
it does not apply.  The first strategy to produce a list wins:

1. ``decode_json``: the whole text is JSON, either a bare array or an
   object whose ``faqs`` (or first array-valued) field holds the items.
2. ``decode_bracketed_array``: repair step for prose around the payload:
   decode the outermost ``[...]`` substring.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, List, Optional, Sequence

from faqsmith.faq.errors import CountError, ParseError
from faqsmith.faq.models import FAQItem

logger = logging.getLogger(__name__)

ParseStrategy = Callable[[str], Optional[List[Any]]]

_CODE_FENCE = re.compile(r"```(?:json|JSON)?\s*")
_BRACKETED_ARRAY = re.compile(r"\[[\s\S]*\]")

_ITEMS_FIELD = "faqs"


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers (```` ```json ```` / ```` ``` ````)."""
    return _CODE_FENCE.sub("", text).strip()


def _unwrap(value: Any) -> Optional[List[Any]]:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        if isinstance(value.get(_ITEMS_FIELD), list):
            return value[_ITEMS_FIELD]
        for field_value in value.values():
            if isinstance(field_value, list):
                return field_value
    return None


def decode_json(text: str) -> Optional[List[Any]]:
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        return None
    return _unwrap(decoded)


def decode_bracketed_array(text: str) -> Optional[List[Any]]:
    match = _BRACKETED_ARRAY.search(text)
    if match is None:
        return None
    try:
        decoded = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, list) else None


PARSE_STRATEGIES: Sequence[ParseStrategy] = (decode_json, decode_bracketed_array)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_faq_response(
    raw: Optional[str],
    strategies: Sequence[ParseStrategy] = PARSE_STRATEGIES,
) -> List[Any]:
    """Decode *raw* generator output into a list of (unvalidated) items.

    Raises:
        ParseError: If the output is empty or no strategy can decode it.
    """
    if raw is None or not raw.strip():
        raise ParseError("Empty response from the FAQ generator.", fragment_length=0)

    text = strip_code_fences(raw)
    for strategy in strategies:
        items = strategy(text)
        if items is not None:
            logger.debug("Decoded %d item(s) with %s", len(items), strategy.__name__)
            return items

    raise ParseError(
        "Failed to parse FAQ response: the generator did not return valid JSON.",
        fragment_length=len(text),
    )


def validate_items(items: Sequence[Any]) -> List[FAQItem]:
    """Check every item has a non-empty ``question`` and ``answer``; trim both.

    One bad item fails the whole batch.

    Raises:
        ParseError: Naming the index of the first malformed item.
    """
    validated: List[FAQItem] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ParseError(f"FAQ at index {index} is not an object", index=index)
        for field_name in ("question", "answer"):
            value = item.get(field_name)
            if not isinstance(value, str) or not value.strip():
                raise ParseError(
                    f"FAQ at index {index} is missing a valid {field_name}",
                    index=index,
                )
        validated.append(
            FAQItem(question=item["question"].strip(), answer=item["answer"].strip())
        )
    return validated


def reconcile_count(items: List[FAQItem], count: int) -> List[FAQItem]:
    """Trim surplus items; refuse a shortfall.

    Raises:
        CountError: If fewer than *count* items were generated.
    """
    if len(items) > count:
        logger.warning("Received %d FAQs, trimmed to %d", len(items), count)
        return items[:count]
    if len(items) < count:
        raise CountError(expected=count, received=len(items))
    return items
