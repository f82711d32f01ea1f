"""
CRO Analysis Prompts for Claude API

Builds the system and user prompts for landing-page audits, copy rewrites and
the model availability probe. Every analysis prompt asks for strict JSON.
"""

import json
from typing import Dict, Optional

FREE_SCHEMA = """{
  "score": number (0-100),
  "summary": string,
  "key_findings": [{"title": string, "impact": "high"|"medium"|"low", "recommendation": string}],
  "quick_wins": [string]
}"""

FULL_SCHEMA = """{
  "score": number (0-100),
  "summary": string,
  "key_findings": [{"title": string, "impact": "high"|"medium"|"low", "recommendation": string}],
  "quick_wins": [string],
  "prioritized_backlog": [{"title": string, "impact": "high"|"medium"|"low", "effort": "low"|"medium"|"high", "eta_days": number, "lift_percent": number, "notes": string}],
  "content_audit": [{"section": string, "status": "ok"|"weak"|"missing", "rationale": string, "suggestions": [string]}]
}"""

PROBE_SYSTEM_PROMPT = "You are a helpful assistant."
PROBE_USER_PROMPT = "Return exactly: OK"


def get_system_prompt(mode: str = "free") -> str:
    """
    System prompt for a landing-page audit.

    Args:
        mode: "free" asks for score, summary, findings and quick wins only.
              "full" additionally asks for a prioritized backlog and a
              per-section content audit.
    """
    schema = FULL_SCHEMA if mode == "full" else FREE_SCHEMA
    max_items = 8 if mode == "full" else 6
    return f"""You are an Expert Conversion Rate Optimization (CRO) and UX auditor for marketing landing pages.
You review the visible copy and structure of a page and point out what stops visitors from converting.

Return ONLY strict JSON, no markdown fences and no commentary, with exactly these fields:
{schema}

Rules:
- Be concise and practical. At most {max_items} items per list.
- "impact" reflects expected effect on conversions, not effort.
- Recommendations must be specific to this page: quote or reference the actual copy.
- Quick wins are changes a marketer can ship in under a day.
- Do not invent sections the page text does not support."""


def get_user_prompt(url: str, signals: Dict, sections: Dict[str, bool], text: str) -> str:
    present = [name for name, ok in sections.items() if ok]
    missing = [name for name, ok in sections.items() if not ok]
    return f"""URL: {url}
Title: {signals.get("title", "")}
Meta description: {signals.get("description", "")}
H1/H2/H3: {signals.get("h1_count", 0)}/{signals.get("h2_count", 0)}/{signals.get("h3_count", 0)}
Images without alt text: {signals.get("images_missing_alt", 0)} of {signals.get("images_total", 0)}
Sections detected by keyword: {", ".join(present) or "none"}
Sections not detected: {", ".join(missing) or "none"}

PAGE TEXT:
{text}
"""


COPY_AUGMENT_SYSTEM_PROMPT = """You are a senior conversion copywriter.
Given the current copy of a landing page, propose better copy for its key fields
(title tag, meta description, H1 headline, primary CTA, subheadline).

Return ONLY strict JSON:
{"rows": [{"field": string, "current": string, "recommended": string, "priority": "low"|"med"|"high", "lift_percent": number (0-12)}]}

At most 5 rows, highest priority first."""


def get_copy_augment_prompt(url: str, current: Dict[str, str]) -> str:
    return json.dumps({"url": url, "current": current}, ensure_ascii=False)


COPY_EXAMPLE_SYSTEM_PROMPT = """You are a senior conversion copywriter.
Write one concrete rewrite of the given landing page field. Return only the
rewritten text, no quotes and no explanation."""


def get_copy_example_prompt(
    field: Optional[str],
    current: str,
    recommended: str,
    url: Optional[str] = None,
    title: Optional[str] = None,
    meta_description: Optional[str] = None,
    audience_hint: Optional[str] = None,
) -> str:
    lines = [
        f"Field: {field or 'copy'}",
        f"Current: {current}",
        f"Direction: {recommended}",
    ]
    if url:
        lines.append(f"Page: {url}")
    if title:
        lines.append(f"Page title: {title}")
    if meta_description:
        lines.append(f"Meta description: {meta_description}")
    if audience_hint:
        lines.append(f"Audience: {audience_hint}")
    return "\n".join(lines)
