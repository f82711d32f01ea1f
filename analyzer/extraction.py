"""
Regex-based text extraction and structural page signals.

These are heuristics over raw HTML, not a parser. They are good enough to
give the model a readable sample of the page and a handful of counts.
"""

import html as html_lib
import re
from dataclasses import dataclass, field, asdict
from typing import Dict, List
from urllib.parse import urlsplit

SCRIPT_RE = re.compile(r"<script\b[\s\S]*?</script\s*>", re.IGNORECASE)
STYLE_RE = re.compile(r"<style\b[\s\S]*?</style\s*>", re.IGNORECASE)
NOSCRIPT_RE = re.compile(r"<noscript\b[\s\S]*?</noscript\s*>", re.IGNORECASE)
COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
TAG_RE = re.compile(r"<[^>]+>")
WS_RE = re.compile(r"\s+")

TITLE_RE = re.compile(r"<title[^>]*>([\s\S]*?)</title>", re.IGNORECASE)
META_DESC_RE = re.compile(
    r"<meta[^>]+name=[\"']description[\"'][^>]+content=[\"']([\s\S]*?)[\"'][^>]*>",
    re.IGNORECASE,
)
CANONICAL_RE = re.compile(
    r"<link[^>]+rel=[\"']canonical[\"'][^>]+href=[\"']([^\"']+)[\"'][^>]*>",
    re.IGNORECASE,
)
HEADING_RE = re.compile(r"<(h[1-3])\b[^>]*>([\s\S]*?)</\1\s*>", re.IGNORECASE)
IMG_RE = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
ALT_RE = re.compile(r"\balt=[\"']([^\"']*)[\"']", re.IGNORECASE)
HREF_RE = re.compile(r"<a\b[^>]*href=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)


def strip_markup(html: str) -> str:
    """Drop script/style/comment blocks and tags, unescape entities, collapse whitespace"""
    s = html or ""
    s = SCRIPT_RE.sub(" ", s)
    s = STYLE_RE.sub(" ", s)
    s = NOSCRIPT_RE.sub(" ", s)
    s = COMMENT_RE.sub(" ", s)
    s = TAG_RE.sub(" ", s)
    s = html_lib.unescape(s)
    return WS_RE.sub(" ", s).strip()


def extract_text(html: str, max_chars: int = 16000) -> str:
    """Visible text of ``html`` truncated to ``max_chars`` characters"""
    return strip_markup(html)[:max_chars]


@dataclass
class PageSignals:
    title: str = ""
    description: str = ""
    canonical: str = ""
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    headings: List[Dict[str, str]] = field(default_factory=list)
    images_total: int = 0
    images_missing_alt: int = 0
    links_total: int = 0
    links_internal: int = 0
    links_external: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


def _first_group(pattern: re.Pattern, html: str) -> str:
    m = pattern.search(html)
    return strip_markup(m.group(1)) if m else ""


def count_tags(html: str, tag: str) -> int:
    return len(re.findall(rf"<{tag}\b", html, re.IGNORECASE))


def parse_headings(html: str) -> List[Dict[str, str]]:
    return [
        {"tag": m.group(1).lower(), "text": strip_markup(m.group(2))}
        for m in HEADING_RE.finditer(html)
    ]


def classify_links(html: str, base_url: str) -> Dict[str, int]:
    host = urlsplit(base_url).netloc
    total = internal = external = 0
    for m in HREF_RE.finditer(html):
        total += 1
        href = m.group(1).strip()
        if not href:
            continue
        if re.match(r"^https?://", href, re.IGNORECASE):
            if urlsplit(href).netloc == host:
                internal += 1
            else:
                external += 1
        else:
            # relative links stay on the site
            internal += 1
    return {"total": total, "internal": internal, "external": external}


def analyze_images(html: str) -> Dict[str, int]:
    imgs = IMG_RE.findall(html)
    missing = 0
    for img in imgs:
        alt = ALT_RE.search(img)
        if not alt or not alt.group(1).strip():
            missing += 1
    return {"total": len(imgs), "missing_alt": missing}


def extract_page_signals(html: str, base_url: str) -> PageSignals:
    """Collect meta tags, heading outline, image and link counts from raw HTML"""
    html = html or ""
    links = classify_links(html, base_url)
    images = analyze_images(html)
    return PageSignals(
        title=_first_group(TITLE_RE, html),
        description=_first_group(META_DESC_RE, html),
        canonical=_first_group(CANONICAL_RE, html),
        h1_count=count_tags(html, "h1"),
        h2_count=count_tags(html, "h2"),
        h3_count=count_tags(html, "h3"),
        headings=parse_headings(html),
        images_total=images["total"],
        images_missing_alt=images["missing_alt"],
        links_total=links["total"],
        links_internal=links["internal"],
        links_external=links["external"],
    )
