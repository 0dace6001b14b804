"""Prompt construction for FAQ generation.

Providers under- and over-generate when the count is only mentioned once,
so the prompt states it as an instruction and again as a hard constraint.
"""

from __future__ import annotations

import math
from typing import Any

MIN_FAQ_COUNT = 5
MAX_FAQ_COUNT = 10
DEFAULT_FAQ_COUNT = 5

TRUNCATION_MARKER = "..."


def clamp_count(value: Any) -> int:
    """Coerce *value* into ``[MIN_FAQ_COUNT, MAX_FAQ_COUNT]``.

    Numbers (and numeric strings) are floored first, so infinities and
    oversized integers land on the nearest bound.  Anything unusable
    (``None``, booleans, NaN, junk strings, zero) falls back to
    ``DEFAULT_FAQ_COUNT``.
    """
    if isinstance(value, bool):
        return DEFAULT_FAQ_COUNT
    try:
        number = float(value)
    except OverflowError:
        # int too large for a float
        number = math.inf if value > 0 else -math.inf
    except (TypeError, ValueError):
        return DEFAULT_FAQ_COUNT

    if math.isnan(number) or number == 0:
        return DEFAULT_FAQ_COUNT
    if math.isinf(number):
        return MAX_FAQ_COUNT if number > 0 else MIN_FAQ_COUNT
    return min(max(math.floor(number), MIN_FAQ_COUNT), MAX_FAQ_COUNT)


def truncate_text(text: str, limit: int) -> str:
    """Cut *text* to *limit* characters, appending ``...`` when anything was dropped."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def build_prompt(text: str, count: int) -> str:
    """Return the single instruction sent to the generator."""
    return f"""You are an expert content analyst. Analyze the following website content and generate EXACTLY {count} high-quality, relevant frequently asked questions (FAQs) with clear, concise answers.

CRITICAL REQUIREMENT: You MUST generate exactly {count} FAQs. No more, no less. If you generate {count + 1} or {count - 1}, the response will be invalid.

Content Analysis Guidelines:
1. Identify the main topics and key information in the content
2. Focus on questions that users would genuinely ask about this content
3. Ensure questions are specific, clear, and directly related to the content
4. Provide concise, accurate answers based solely on the provided content
5. Avoid generic or vague questions
6. Make sure each FAQ pair is unique and valuable

Content:
{text}

Requirements:
- Generate EXACTLY {count} FAQs (this is mandatory - count them before responding)
- Each FAQ must have a clear, specific question
- Each answer must be concise (2-4 sentences) and directly address the question
- Answers must be based only on the provided content
- Questions should cover different aspects of the content
- Use proper grammar and professional language
- The "faqs" array must contain exactly {count} items

Return ONLY a valid JSON object in this exact format (no markdown, no code blocks, no explanations):
{{
  "faqs": [
    {{
      "question": "What is the main purpose of this service?",
      "answer": "The main purpose is to provide users with..."
    }},
    {{
      "question": "How does this feature work?",
      "answer": "This feature works by..."
    }}
  ]
}}

Remember: The "faqs" array must contain exactly {count} items."""
