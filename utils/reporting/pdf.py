#!/usr/bin/env python3
"""
CRO Audit PDF Report Generator

Lays a finished report out on fixed-size A4 pages: header, score, summary,
then one block per category. Lines are wrapped greedily to a point-width
budget and a new page starts when the cursor reaches the bottom margin.
"""

import logging
from io import BytesIO
from typing import Dict, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from analyzer.urls import host_of

logger = logging.getLogger(__name__)

FONT_NAME = "Helvetica"
FONT_NAME_BOLD = "Helvetica-Bold"

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_X = 40
TOP_Y = PAGE_HEIGHT - 48
BOTTOM_Y = 80
BODY_SIZE = 11
LINE_GAP = 4

COLORS = {
    "primary_red": colors.HexColor("#DC3545"),
    "dark_gray": colors.HexColor("#1F2937"),
    "medium_gray": colors.HexColor("#6B7280"),
    "blue": colors.HexColor("#3B82F6"),
    "fair_yellow": colors.HexColor("#F59E0B"),
    "good_green": colors.HexColor("#10B981"),
}

IMPACT_COLORS = {
    "high": COLORS["primary_red"],
    "medium": COLORS["fair_yellow"],
    "low": COLORS["good_green"],
}


def pdf_safe(text) -> str:
    """Reduce text to what the built-in Type1 fonts can draw"""
    return str(text if text is not None else "").encode("cp1252", "replace").decode("cp1252")


def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """
    Greedy word wrap.

    Words are added to the current line while it fits ``max_width`` points.
    A single word wider than the budget is split by characters.
    """
    lines: List[str] = []
    line = ""
    for word in pdf_safe(text).split():
        candidate = f"{line} {word}" if line else word
        if stringWidth(candidate, font_name, font_size) <= max_width:
            line = candidate
            continue
        if line:
            lines.append(line)
        # Hard-split words that do not fit on a line of their own
        while stringWidth(word, font_name, font_size) > max_width and len(word) > 1:
            cut = len(word)
            while cut > 1 and stringWidth(word[:cut], font_name, font_size) > max_width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        line = word
    if line:
        lines.append(line)
    return lines


class ReportPdfWriter:
    """Cursor-based writer over a reportlab canvas"""

    def __init__(self, title: str = "CRO Audit Report"):
        self.buffer = BytesIO()
        # Uncompressed streams keep the text layer searchable as plain bytes
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4, pageCompression=0)
        self.canvas.setTitle(title)
        self.y = TOP_Y
        self.page_number = 1

    def _footer(self):
        self.canvas.setFont(FONT_NAME, 8)
        self.canvas.setFillColor(COLORS["medium_gray"])
        self.canvas.drawRightString(PAGE_WIDTH - MARGIN_X, 40, f"Page {self.page_number}")

    def new_page(self):
        self._footer()
        self.canvas.showPage()
        self.page_number += 1
        self.y = TOP_Y

    def ensure_space(self, height: float):
        if self.y - height < BOTTOM_Y:
            self.new_page()

    def gap(self, height: float):
        self.y -= height

    def text(
        self,
        text: str,
        size: float = BODY_SIZE,
        font: str = FONT_NAME,
        color=None,
        indent: float = 0,
    ):
        """Write wrapped text, breaking pages as needed"""
        max_width = PAGE_WIDTH - 2 * MARGIN_X - indent
        for line in wrap_text(text, font, size, max_width) or [""]:
            self.ensure_space(size + LINE_GAP)
            self.canvas.setFont(font, size)
            self.canvas.setFillColor(color or COLORS["dark_gray"])
            self.canvas.drawString(MARGIN_X + indent, self.y - size, line)
            self.y -= size + LINE_GAP

    def heading(self, text: str):
        self.gap(10)
        self.ensure_space(40)
        self.text(text, size=14, font=FONT_NAME_BOLD)
        self.gap(2)

    def bullet(self, text: str, indent: float = 8, color=None, font: str = FONT_NAME):
        self.text(f"• {text}", indent=indent, color=color, font=font)

    def finish(self) -> BytesIO:
        self._footer()
        self.canvas.save()
        self.buffer.seek(0)
        return self.buffer


def _findings(report: Dict) -> List[Dict]:
    return report.get("key_findings") or report.get("findings") or []


def create_header_section(pdf: ReportPdfWriter, report: Dict):
    pdf.text("CRO Audit Report", size=20, font=FONT_NAME_BOLD)
    pdf.gap(6)
    pdf.text(f"URL: {report.get('url') or '-'}", size=12, color=COLORS["blue"])
    if report.get("title"):
        pdf.text(f"Page title: {report['title']}", color=COLORS["medium_gray"])
    score = report.get("score")
    if isinstance(score, (int, float)):
        grade = report.get("grade")
        pdf.text(
            f"Score: {score}/100" + (f" (grade {grade})" if grade else ""),
            size=13,
            font=FONT_NAME_BOLD,
        )
    if report.get("uplift_percent"):
        pdf.text(f"Estimated conversion uplift: +{report['uplift_percent']}%")
    if report.get("analyzed_at"):
        pdf.text(f"Analyzed: {report['analyzed_at']}", size=9, color=COLORS["medium_gray"])


def create_summary_section(pdf: ReportPdfWriter, report: Dict):
    if not report.get("summary"):
        return
    pdf.heading("Summary")
    pdf.text(report["summary"])


def create_sections_section(pdf: ReportPdfWriter, report: Dict):
    sections = report.get("sections_detected") or {}
    if not sections:
        return
    pdf.heading("Sections")
    for name, present in sections.items():
        pdf.bullet(
            f"{name.replace('_', ' ')}: {'present' if present else 'missing'}",
            color=COLORS["dark_gray"] if present else COLORS["primary_red"],
        )


def create_findings_section(pdf: ReportPdfWriter, report: Dict):
    findings = _findings(report)
    if not findings:
        return
    pdf.heading("Key Findings")
    for finding in findings:
        impact = str(finding.get("impact") or "").lower()
        pdf.bullet(
            f"[{impact.upper() or '-'}] {finding.get('title', '')}",
            color=IMPACT_COLORS.get(impact),
            font=FONT_NAME_BOLD,
        )
        if finding.get("recommendation"):
            pdf.text(finding["recommendation"], indent=20)
        pdf.gap(2)


def create_quick_wins_section(pdf: ReportPdfWriter, report: Dict):
    wins = report.get("quick_wins") or []
    if not wins:
        return
    pdf.heading("Quick Wins")
    for win in wins:
        pdf.bullet(win)


def create_backlog_section(pdf: ReportPdfWriter, report: Dict):
    backlog = report.get("prioritized_backlog") or []
    if not backlog:
        return
    pdf.heading("Prioritized Backlog")
    for item in backlog:
        details = [f"impact {item.get('impact', '-')}", f"effort {item.get('effort', '-')}"]
        if item.get("eta_days"):
            details.append(f"ETA {item['eta_days']}d")
        if item.get("lift_percent"):
            details.append(f"+{item['lift_percent']}%")
        pdf.bullet(f"{item.get('title', '')} ({', '.join(details)})")
        if item.get("notes"):
            pdf.text(item["notes"], indent=20, color=COLORS["medium_gray"])


def create_content_audit_section(pdf: ReportPdfWriter, report: Dict):
    audit = report.get("content_audit") or []
    if not audit:
        return
    pdf.heading("Content Audit")
    for row in audit:
        pdf.bullet(
            f"{row.get('section', '')}: {row.get('status', '')}",
            font=FONT_NAME_BOLD,
        )
        if row.get("rationale"):
            pdf.text(row["rationale"], indent=20)
        for suggestion in row.get("suggestions") or []:
            pdf.text(f"- {suggestion}", indent=28, color=COLORS["medium_gray"])


def generate_pdf(report: Dict, output_path: Optional[str] = None) -> Optional[BytesIO]:
    """
    Generate the complete PDF report

    Args:
        report: Report dictionary (url, score, summary, key_findings,
            quick_wins, prioritized_backlog, content_audit, sections_detected)
        output_path: Optional file path to save PDF. If None, returns BytesIO buffer

    Returns:
        BytesIO buffer if output_path is None, otherwise None (saves to file)
    """
    pdf = ReportPdfWriter(title=f"CRO Audit Report - {report.get('url') or ''}")

    create_header_section(pdf, report)
    create_summary_section(pdf, report)
    create_sections_section(pdf, report)
    create_findings_section(pdf, report)
    create_quick_wins_section(pdf, report)
    create_backlog_section(pdf, report)
    create_content_audit_section(pdf, report)

    buffer = pdf.finish()
    logger.info(f"📄 PDF report for {report.get('url')} built ({pdf.page_number} pages)")

    if output_path:
        with open(output_path, "wb") as f:
            f.write(buffer.getvalue())
        return None
    return buffer


def suggest_filename(url: Optional[str]) -> str:
    host = host_of(url or "")
    return f"cro-report_{host}.pdf" if host else "cro-report.pdf"
