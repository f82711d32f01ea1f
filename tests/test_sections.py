from analyzer.extraction import extract_text
from analyzer.sections import SECTION_NAMES, detect_sections, missing_sections


def test_every_section_is_reported():
    flags = detect_sections("Hello world")
    assert set(flags) == set(SECTION_NAMES)
    assert not any(flags.values())


def test_pricing_keyword():
    assert detect_sections("See our Pricing page")["pricing"] is True


def test_match_is_case_insensitive():
    flags = detect_sections("FREQUENTLY ASKED QUESTIONS")
    assert flags["faq"] is True


def test_sample_page(sample_html):
    flags = detect_sections(extract_text(sample_html))
    for name in ("hero", "value_prop", "social_proof", "features", "pricing", "faq", "footer"):
        assert flags[name], name
    assert missing_sections(flags) == ["contact"]


def test_custom_vocabulary():
    flags = detect_sections("limited offer", keywords={"promo": ("offer",)})
    assert flags == {"promo": True}
