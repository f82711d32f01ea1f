# Analyzer package - CRO analysis engine
# Only dependency-free modules are re-exported here; utils.clients imports
# analyzer.prompts, so copywriting must be imported from its module.
from .extraction import PageSignals, extract_page_signals, extract_text
from .grading import estimate_uplift_pct, letter_from_score, overall_score
from .prompts import get_system_prompt, get_user_prompt
from .urls import InvalidURLError, normalize_url

__all__ = [
    "PageSignals",
    "extract_page_signals",
    "extract_text",
    "estimate_uplift_pct",
    "letter_from_score",
    "overall_score",
    "get_system_prompt",
    "get_user_prompt",
    "InvalidURLError",
    "normalize_url",
]
