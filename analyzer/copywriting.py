"""
Copy rewrite suggestions for landing page fields.
"""

import logging
from typing import Callable, Dict, List, Optional

from analyzer.extraction import extract_page_signals
from analyzer.fetcher import FetchedPage, fetch_page
from analyzer.prompts import (
    COPY_AUGMENT_SYSTEM_PROMPT,
    COPY_EXAMPLE_SYSTEM_PROMPT,
    get_copy_augment_prompt,
    get_copy_example_prompt,
)
from analyzer.urls import normalize_url
from api.models import CopyExampleRequest, CopyMeta, CopyRow
from utils.clients.anthropic import CROModelClient
from utils.parsing.json import ModelOutputError, finite_number, repair_and_parse_json

logger = logging.getLogger(__name__)

MAX_COPY_ROWS = 5
MAX_COPY_LIFT = 12
PRIORITY_ALIASES = {"low": "low", "med": "med", "medium": "med", "high": "high"}


def normalize_copy_rows(raw: List) -> List[CopyRow]:
    """Clamp lift to 0..12, map priorities onto low/med/high, keep at most five rows"""
    rows = []
    for item in raw:
        if len(rows) >= MAX_COPY_ROWS:
            break
        if not isinstance(item, dict):
            continue
        recommended = str(item.get("recommended") or "").strip()
        if not recommended:
            continue
        lift = finite_number(item.get("lift_percent"), "lift_percent")
        lift = round(lift) if lift is not None else 0
        priority = PRIORITY_ALIASES.get(str(item.get("priority") or "").strip().lower(), "med")
        rows.append(
            CopyRow(
                field=str(item.get("field") or "copy").strip(),
                current=str(item.get("current") or "").strip(),
                recommended=recommended,
                priority=priority,
                lift_percent=max(0, min(MAX_COPY_LIFT, lift)),
            )
        )
    return rows


def augment_copy(
    model_client: CROModelClient,
    url: str,
    meta: Optional[CopyMeta] = None,
    fetch: Callable[[str], FetchedPage] = fetch_page,
) -> List[CopyRow]:
    """
    Suggest rewrites for a page's title, description and headline.

    The page is fetched for its current copy; explicit ``meta`` values win.

    Raises:
        InvalidURLError, PageFetchError, model client errors, ModelOutputError
    """
    url = normalize_url(url)
    model_client.get_client()  # fail on a missing key before fetching
    page = fetch(url)
    signals = extract_page_signals(page.html, page.final_url)
    h1 = next((h["text"] for h in signals.headings if h["tag"] == "h1"), "")

    current: Dict[str, str] = {
        "title": (meta.title if meta and meta.title else signals.title),
        "meta_description": (meta.description if meta and meta.description else signals.description),
        "h1": h1,
    }

    result = model_client.complete(
        COPY_AUGMENT_SYSTEM_PROMPT,
        get_copy_augment_prompt(page.final_url, current),
        temperature=0.6,
    )
    data = repair_and_parse_json(result.text)
    raw_rows = data.get("rows")
    if not isinstance(raw_rows, list):
        raise ModelOutputError("'rows' must be a list")

    rows = normalize_copy_rows(raw_rows)
    logger.info(f"✍️ {len(rows)} copy rows for {page.final_url} via {result.model}")
    return rows


def copy_example(model_client: CROModelClient, request: CopyExampleRequest) -> str:
    """One concrete rewrite of a single field"""
    result = model_client.complete(
        COPY_EXAMPLE_SYSTEM_PROMPT,
        get_copy_example_prompt(
            request.field,
            request.current,
            request.recommended,
            url=request.url,
            title=request.title,
            meta_description=request.meta_description,
            audience_hint=request.audience_hint,
        ),
        max_tokens=400,
        temperature=0.7,
    )
    example = result.text.strip()
    if not example:
        raise ModelOutputError("no content")
    return example
