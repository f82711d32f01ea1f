"""
Analysis pipeline for CRO Analyzer

fetch → extract → model call → parse, shared by the request/response
endpoint and the streaming relay. The pipeline is synchronous; the relay
runs it in a worker thread and listens to its state callbacks.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from analyzer.extraction import PageSignals, extract_page_signals, extract_text
from analyzer.fetcher import FetchedPage, fetch_page
from analyzer.grading import estimate_uplift_pct, letter_from_score, overall_score
from analyzer.prompts import get_system_prompt, get_user_prompt
from analyzer.sections import detect_sections
from analyzer.urls import normalize_url
from api.models import Report
from utils.clients.anthropic import CROModelClient
from utils.parsing.json import ModelOutputError, finite_number, repair_and_parse_json
from utils.screenshots import screenshot_url

logger = logging.getLogger(__name__)

BACKLOG_IMPACT_BY_RANK = {3: "high", 2: "medium", 1: "low"}

# Per-mode list caps and field truncation for model output
LIST_CAP = {"free": 6, "full": 8}
MAX_SUGGESTIONS = 6
TITLE_CHARS = 140
RECOMMENDATION_CHARS = 800
QUICK_WIN_CHARS = 220
RATIONALE_CHARS = 600
NOTES_CHARS = 400
SUMMARY_CHARS = 1200


class AnalysisState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    MODEL_CALLING = "model_calling"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (AnalysisState.DONE, AnalysisState.FAILED)


@dataclass
class PipelineResult:
    report: Report
    signals: PageSignals
    final_url: str


def _text(value: Any, limit: int) -> str:
    if value is None:
        return ""
    return str(value).strip()[:limit]


def _list(data: Dict, *keys: str) -> List:
    for key in keys:
        if key in data and data[key] is not None:
            value = data[key]
            if not isinstance(value, list):
                raise ModelOutputError(f"'{key}' must be a list")
            return value
    return []


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _item(value: Any, name: str) -> Dict:
    if not isinstance(value, dict):
        raise ModelOutputError(f"{name} entries must be objects")
    return value


def _normalize_findings(raw: List, cap: int) -> List[Dict]:
    return [
        {
            "title": _text(f.get("title"), TITLE_CHARS),
            "impact": _lower(f.get("impact")),
            "recommendation": _text(f.get("recommendation"), RECOMMENDATION_CHARS),
        }
        for f in (_item(x, "key_findings") for x in raw[:cap])
    ]


def _normalize_backlog(raw: List, cap: int) -> List[Dict]:
    out = []
    for b in (_item(x, "prioritized_backlog") for x in raw[:cap]):
        impact = b.get("impact")
        rank = finite_number(impact, "impact")
        if rank is not None:
            impact = BACKLOG_IMPACT_BY_RANK.get(int(rank), impact)
        item = {
            "title": _text(b.get("title"), TITLE_CHARS),
            "impact": _lower(impact),
            "effort": _lower(b.get("effort") or "medium"),
        }
        eta = finite_number(b.get("eta_days"), "eta_days")
        if eta is not None:
            item["eta_days"] = max(1, min(30, round(eta)))
        lift = finite_number(b.get("lift_percent"), "lift_percent")
        if lift is not None:
            item["lift_percent"] = max(1, min(50, round(lift)))
        if b.get("notes"):
            item["notes"] = _text(b["notes"], NOTES_CHARS)
        out.append(item)
    return out


def _normalize_audit(raw: List, cap: int) -> List[Dict]:
    out = []
    for c in (_item(x, "content_audit") for x in raw[:cap]):
        suggestions = c.get("suggestions") or []
        if not isinstance(suggestions, list):
            suggestions = [suggestions]
        out.append(
            {
                "section": _text(c.get("section") or "section", TITLE_CHARS).lower().replace(" ", "_"),
                "status": _lower(c.get("status")),
                "rationale": _text(c.get("rationale"), RATIONALE_CHARS),
                "suggestions": [_text(s, QUICK_WIN_CHARS) for s in suggestions[:MAX_SUGGESTIONS]],
            }
        )
    return out


def build_report(
    data: Dict,
    *,
    url: str,
    title: Optional[str],
    mode: str,
    model: str,
    sections: Dict[str, bool],
    hero_screenshot: Optional[str] = None,
) -> Report:
    """
    Turn parsed model JSON into a validated Report.

    Text is trimmed and lists are capped. Values outside the allowed
    enumerations are not coerced: they fail validation.

    Raises:
        ModelOutputError: the data does not fit the report schema
    """
    cap = LIST_CAP.get(mode, LIST_CAP["free"])
    findings = _normalize_findings(_list(data, "key_findings", "findings"), cap)
    quick_wins = [_text(q, QUICK_WIN_CHARS) for q in _list(data, "quick_wins")[:cap]]
    if mode == "full":
        backlog = _normalize_backlog(_list(data, "prioritized_backlog"), cap)
        audit = _normalize_audit(_list(data, "content_audit"), cap)
    else:
        backlog, audit = [], []

    score = overall_score(finite_number(data.get("score"), "score"), sections, findings)
    try:
        report = Report(
            url=url,
            title=title or None,
            score=score,
            grade=letter_from_score(score),
            summary=_text(data.get("summary"), SUMMARY_CHARS),
            key_findings=findings,
            quick_wins=[q for q in quick_wins if q],
            prioritized_backlog=backlog,
            content_audit=audit,
            screenshots={"hero": hero_screenshot},
            sections_detected=sections,
            model=model,
            mode=mode,
            analyzed_at=datetime.now(timezone.utc).isoformat(),
        )
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ModelOutputError(f"schema mismatch at {where}: {first.get('msg')}") from e

    report.uplift_percent = estimate_uplift_pct(report.prioritized_backlog)
    return report


class AnalysisPipeline:
    """
    Runs one analysis end to end.

    Args:
        settings: Settings instance (text budget, screenshot template)
        model_client: CROModelClient carrying the fallback policy
        fetch: page fetcher, replaceable in tests
    """

    def __init__(
        self,
        settings,
        model_client: CROModelClient,
        fetch: Callable[[str], FetchedPage] = fetch_page,
    ):
        self.settings = settings
        self.model_client = model_client
        self.fetch = fetch

    def run(
        self,
        url: str,
        mode: str = "free",
        on_state: Optional[Callable[[AnalysisState], None]] = None,
    ) -> PipelineResult:
        notify = on_state or (lambda state: None)
        url = normalize_url(url)
        started = time.time()

        notify(AnalysisState.FETCHING)
        page = self.fetch(url)

        notify(AnalysisState.EXTRACTING)
        text = extract_text(page.html, self.settings.MAX_TEXT_CHARS)
        signals = extract_page_signals(page.html, page.final_url)
        headings = " ".join(h["text"] for h in signals.headings)
        sections = detect_sections(" ".join([signals.title, signals.description, headings, text]))
        logger.info(f"📄 Extracted {len(text)} chars, sections: {sections}")

        notify(AnalysisState.MODEL_CALLING)
        result = self.model_client.complete(
            get_system_prompt(mode),
            get_user_prompt(page.final_url, signals.to_dict(), sections, text),
        )

        notify(AnalysisState.PARSING)
        data = repair_and_parse_json(result.text)
        report = build_report(
            data,
            url=page.final_url,
            title=signals.title,
            mode=mode,
            model=result.model,
            sections=sections,
            hero_screenshot=screenshot_url(page.final_url, self.settings.SCREENSHOT_URL_TMPL),
        )
        logger.info(
            f"⏱️  Analysis of {page.final_url} finished in {time.time() - started:.2f}s "
            f"(score {report.score}, model {report.model})"
        )
        return PipelineResult(report=report, signals=signals, final_url=page.final_url)
