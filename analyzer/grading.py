"""
Score, grade and uplift arithmetic for CRO reports.

Small lookup tables and clamped sums. The overall score prefers whatever
the model returned and only falls back to section coverage and finding
severity when the model gave none.
"""

from typing import Dict, List, Optional, Sequence

IMPACT_WEIGHT: Dict[str, int] = {"high": 3, "medium": 2, "low": 1}

# Baseline uplift per backlog item when the model gives no explicit lift
UPLIFT_BASE: Dict[str, int] = {"high": 12, "medium": 6, "low": 3}

STRUCTURE_WEIGHT = 0.55
CONTENT_WEIGHT = 0.45


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _get(item, key, default=None):
    if isinstance(item, dict):
        return item.get(key, default)
    return getattr(item, key, default)


def letter_from_score(score: float) -> str:
    """A..F grade from a 0..100 score"""
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    if score >= 50:
        return "E"
    return "F"


def structure_score(sections: Dict[str, bool]) -> int:
    if not sections:
        return 0
    present = sum(1 for v in sections.values() if v)
    return round(present / len(sections) * 100)


def content_score(findings: Sequence) -> int:
    """100 when there are no findings, lower as more of them are high impact"""
    if not findings:
        return 100
    max_penalty = len(findings) * IMPACT_WEIGHT["high"]
    penalty = sum(IMPACT_WEIGHT.get(_get(f, "impact"), 0) for f in findings)
    return int(clamp(100 - round(penalty / max_penalty * 100)))


def overall_score(
    model_score: Optional[float], sections: Dict[str, bool], findings: Sequence
) -> int:
    if isinstance(model_score, (int, float)) and not isinstance(model_score, bool):
        return int(round(clamp(model_score)))
    combined = STRUCTURE_WEIGHT * structure_score(sections) + CONTENT_WEIGHT * content_score(findings)
    return int(clamp(round(combined)))


def top_findings(findings: Sequence, n: int = 5) -> List:
    """Worst ``n`` findings, high before medium before low, original order kept within a level"""
    return sorted(findings, key=lambda f: -IMPACT_WEIGHT.get(_get(f, "impact"), 0))[:n]


def estimate_item_uplift(item) -> int:
    explicit = _get(item, "lift_percent")
    if isinstance(explicit, (int, float)):
        return int(explicit)
    base = UPLIFT_BASE.get(_get(item, "impact"), 3)
    eta = _get(item, "eta_days") or 3
    if eta <= 2:
        factor = 1.2
    elif eta <= 5:
        factor = 1.0
    else:
        factor = 0.8
    return round(base * factor)


def estimate_uplift_pct(backlog: Sequence, cap: int = 35) -> int:
    """Aggregate uplift over the first five backlog items, capped to stay conservative"""
    total = sum(estimate_item_uplift(item) for item in list(backlog)[:5])
    return int(clamp(total, 0, cap))
