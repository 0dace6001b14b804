"""FAQ synthesis package: prompt, generator providers, parsing and retry."""

from faqsmith.faq.errors import CountError, InputError, ParseError, UpstreamError
from faqsmith.faq.models import FAQItem, FAQStatus
from faqsmith.faq.synthesizer import FAQSynthesizer, SynthesizerConfig

__all__ = [
    "FAQSynthesizer",
    "SynthesizerConfig",
    "FAQItem",
    "FAQStatus",
    "InputError",
    "UpstreamError",
    "ParseError",
    "CountError",
]
