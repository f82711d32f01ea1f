from reportlab.pdfbase.pdfmetrics import stringWidth

from utils.reporting.pdf import (
    FONT_NAME,
    ReportPdfWriter,
    generate_pdf,
    pdf_safe,
    suggest_filename,
    wrap_text,
)

REPORT = {
    "url": "https://acme.test/landing",
    "title": "Acme Analytics",
    "score": 72,
    "grade": "C",
    "summary": "Clear headline, weak call to action.",
    "key_findings": [{"title": "CTA below the fold", "impact": "high", "recommendation": "Move it up."}],
    "quick_wins": ["Add a hero button"],
    "prioritized_backlog": [{"title": "Hero CTA", "impact": "high", "effort": "low", "eta_days": 2, "lift_percent": 8}],
    "content_audit": [{"section": "social_proof", "status": "weak", "rationale": "Logos only.", "suggestions": ["Add a quote"]}],
    "sections_detected": {"hero": True, "pricing": False},
    "uplift_percent": 8,
    "analyzed_at": "2024-05-01T10:00:00+00:00",
}


def test_pdf_bytes():
    data = generate_pdf(REPORT).getvalue()
    assert data.startswith(b"%PDF-")
    assert b"https://acme.test/landing" in data
    assert b"CTA below the fold" in data
    assert b"Page 2" not in data


def test_minimal_report():
    data = generate_pdf({"url": "https://acme.test"}).getvalue()
    assert data.startswith(b"%PDF-")


def test_legacy_findings_key():
    data = generate_pdf({"url": "https://acme.test", "findings": [{"title": "Old key finding", "impact": "low"}]}).getvalue()
    assert b"Old key finding" in data


def test_long_reports_paginate():
    report = dict(
        REPORT,
        key_findings=[
            {"title": f"Finding {i}", "impact": "medium", "recommendation": "word " * 60}
            for i in range(40)
        ],
    )
    data = generate_pdf(report).getvalue()
    assert b"Page 2" in data
    assert b"Finding 39" in data


def test_writer_breaks_pages():
    pdf = ReportPdfWriter()
    for i in range(200):
        pdf.text(f"line {i}")
    assert pdf.page_number > 1
    assert pdf.finish().getvalue().startswith(b"%PDF-")


def test_output_path(tmp_path):
    target = tmp_path / "report.pdf"
    assert generate_pdf(REPORT, str(target)) is None
    assert target.read_bytes().startswith(b"%PDF-")


def test_wrap_text_respects_width():
    text = "conversion " * 30 + "x" * 300
    lines = wrap_text(text, FONT_NAME, 11, 200)
    assert len(lines) > 3
    assert all(stringWidth(line, FONT_NAME, 11) <= 200 for line in lines)
    assert "".join(lines).replace(" ", "") == text.replace(" ", "")


def test_wrap_empty_text():
    assert wrap_text("", FONT_NAME, 11, 200) == []


def test_pdf_safe_replaces_unencodable_characters():
    assert pdf_safe("naïve → ok") == "naïve ? ok"
    assert pdf_safe(None) == ""


def test_suggest_filename():
    assert suggest_filename("https://acme.test/landing") == "cro-report_acme.test.pdf"
    assert suggest_filename(None) == "cro-report.pdf"
