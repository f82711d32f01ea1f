from analyzer.extraction import (
    analyze_images,
    classify_links,
    extract_page_signals,
    extract_text,
    strip_markup,
)


def test_text_drops_scripts_styles_and_tags(sample_html):
    text = extract_text(sample_html)
    assert "window.track" not in text
    assert "color: red" not in text
    assert "<" not in text
    assert "Dashboards that answer questions" in text
    assert '"Best tool we bought this year" & other testimonials.' in text


def test_text_is_truncated(sample_html):
    assert len(extract_text(sample_html, max_chars=50)) == 50


def test_strip_markup_collapses_whitespace():
    assert strip_markup("<p>a\n\n   b</p><!-- hidden -->c") == "a b c"


def test_page_signals(sample_html):
    signals = extract_page_signals(sample_html, "https://acme.test/")
    assert signals.title == "Acme Analytics | Dashboards for busy teams"
    assert signals.description.startswith("Acme turns raw events")
    assert signals.canonical == "https://acme.test/"
    assert (signals.h1_count, signals.h2_count, signals.h3_count) == (1, 4, 1)
    assert signals.headings[0] == {"tag": "h1", "text": "Dashboards that answer questions"}
    assert signals.images_total == 2
    assert signals.images_missing_alt == 1


def test_link_classification(sample_html):
    links = classify_links(sample_html, "https://acme.test/")
    assert links == {"total": 4, "internal": 3, "external": 1}


def test_empty_alt_counts_as_missing():
    assert analyze_images('<img src="a.png" alt=""><img src="b.png" alt="b">') == {"total": 2, "missing_alt": 1}


def test_signals_of_empty_page():
    signals = extract_page_signals("", "https://acme.test/")
    assert signals.title == ""
    assert signals.to_dict()["links_total"] == 0
