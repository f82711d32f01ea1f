"""
Section Detector for CRO Analyzer

Flags which landing-page sections appear to be present by matching extracted
page text against small keyword vocabularies:
- Hero
- Value proposition
- Social proof
- Features
- Pricing
- FAQ
- Contact
- Footer

This is a heuristic. A keyword can appear without the section existing and a
section can exist without any keyword, so false positives and negatives are
expected.
"""

from typing import Dict, Iterable, Tuple


SECTION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "hero": ("get started", "sign up", "start free", "free trial", "book a demo", "request a demo", "welcome"),
    "value_prop": ("why choose", "helps you", "designed for", "built for", "so you can", "save time"),
    "social_proof": ("testimonial", "review", "trusted by", "customers", "rated", "case stud"),
    "features": ("feature", "benefit", "capabilit", "how it works", "integrations"),
    "pricing": ("pricing", "price", "plans", "per month", "/mo", "billed"),
    "faq": ("faq", "frequently asked", "questions"),
    "contact": ("contact", "support", "email us", "call us", "phone"),
    "footer": ("privacy policy", "terms of service", "terms & conditions", "all rights reserved", "copyright", "©"),
}

SECTION_NAMES: Tuple[str, ...] = tuple(SECTION_KEYWORDS)


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def detect_sections(
    text: str, keywords: Dict[str, Tuple[str, ...]] = SECTION_KEYWORDS
) -> Dict[str, bool]:
    """
    Detect section presence by case-insensitive substring search.

    Args:
        text: Extracted page text (markup already stripped)
        keywords: Vocabulary per section name

    Returns:
        Mapping of every section name to True when any of its keywords occurs
    """
    haystack = (text or "").lower()
    return {
        name: _contains_any(haystack, (k.lower() for k in words))
        for name, words in keywords.items()
    }


def missing_sections(flags: Dict[str, bool]) -> list:
    return [name for name in SECTION_NAMES if not flags.get(name)]
