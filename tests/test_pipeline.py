import json

import pytest

from analyzer.fetcher import PageFetchError
from analyzer.urls import InvalidURLError
from config import settings
from conftest import FREE_REPORT_JSON, FULL_REPORT_JSON, answering, fetch_not_found, fetch_sample
from core.pipeline import AnalysisPipeline, AnalysisState, build_report
from utils.parsing.json import ModelOutputError, repair_and_parse_json

SECTIONS = {"hero": True, "pricing": False}


def _build(data, mode="free"):
    return build_report(data, url="https://acme.test/", title="Acme", mode=mode, model="m", sections=SECTIONS)


def test_free_report_has_no_backlog_or_audit():
    report = _build(FULL_REPORT_JSON, mode="free")
    assert report.prioritized_backlog == []
    assert report.content_audit == []
    assert report.score == 72
    assert report.grade == "C"
    assert report.uplift_percent == 0


def test_full_report_normalizes_backlog():
    report = _build(FULL_REPORT_JSON, mode="full")
    hero, teaser = report.prioritized_backlog
    assert hero.lift_percent == 8
    assert teaser.impact == "medium"
    assert teaser.eta_days == 30
    assert report.content_audit[0].section == "social_proof"
    # 8 explicit + medium at eta 30 (6 * 0.8)
    assert report.uplift_percent == 13


def test_lists_are_capped_per_mode():
    data = dict(FREE_REPORT_JSON, key_findings=[{"title": f"f{i}", "impact": "low"} for i in range(12)])
    assert len(_build(data, "free").key_findings) == 6
    assert len(_build(data, "full").key_findings) == 8


def test_score_computed_when_model_gives_none():
    data = dict(FREE_REPORT_JSON, score=None, key_findings=[])
    # 0.55 * 50 + 0.45 * 100 = 72.5
    assert _build(data).score in (72, 73)


def test_legacy_findings_key():
    data = {"findings": [{"title": "Old key", "impact": "HIGH"}]}
    assert _build(data).key_findings[0].impact == "high"


def test_unknown_impact_is_a_schema_mismatch():
    data = {"key_findings": [{"title": "x", "impact": "critical"}]}
    with pytest.raises(ModelOutputError, match="schema mismatch"):
        _build(data)


def test_non_list_field_rejected():
    with pytest.raises(ModelOutputError):
        _build({"quick_wins": "just one"})


def test_pipeline_run_reports_states_in_order():
    client, fake = answering(FREE_REPORT_JSON)
    pipeline = AnalysisPipeline(settings, client, fetch=fetch_sample)
    states = []
    result = pipeline.run("acme.test", on_state=states.append)

    assert states == [
        AnalysisState.FETCHING,
        AnalysisState.EXTRACTING,
        AnalysisState.MODEL_CALLING,
        AnalysisState.PARSING,
    ]
    report = result.report
    assert report.url == "https://acme.test"
    assert report.title == "Acme Analytics | Dashboards for busy teams"
    assert report.sections_detected["pricing"] is True
    assert report.screenshots.hero.endswith("?w=1200")
    assert "https%3A%2F%2Facme.test" in report.screenshots.hero
    assert report.model == fake.models_called[0]

    prompt = fake.calls[0]["messages"][0]["content"]
    assert "Dashboards that answer questions" in prompt


def test_pipeline_fetch_failure():
    client, fake = answering(FREE_REPORT_JSON)
    with pytest.raises(PageFetchError, match="404"):
        AnalysisPipeline(settings, client, fetch=fetch_not_found).run("acme.test")
    assert fake.calls == []


def test_pipeline_invalid_url():
    client, fake = answering(FREE_REPORT_JSON)
    with pytest.raises(InvalidURLError):
        AnalysisPipeline(settings, client, fetch=fetch_sample).run("ftp://acme.test")


def test_pipeline_unparseable_answer():
    client, fake = answering("Sorry, I cannot help with that.")
    with pytest.raises(ModelOutputError):
        AnalysisPipeline(settings, client, fetch=fetch_sample).run("acme.test")


def test_report_serializes():
    client, fake = answering(json.dumps(FULL_REPORT_JSON))
    result = AnalysisPipeline(settings, client, fetch=fetch_sample).run("acme.test", mode="full")
    payload = result.report.model_dump(mode="json")
    assert payload["mode"] == "full"
    assert payload["prioritized_backlog"][0]["title"] == "Hero CTA"


@pytest.mark.parametrize("text", ['{"score": NaN, "summary": "x"}', '{"score": Infinity}', '{"score": -Infinity}'])
def test_non_finite_score_is_invalid_output(text):
    with pytest.raises(ModelOutputError, match="finite"):
        _build(repair_and_parse_json(text))


@pytest.mark.parametrize("field", ["eta_days", "lift_percent", "impact"])
def test_non_finite_backlog_number_is_invalid_output(field):
    item = {"title": "Hero CTA", "impact": "high", "eta_days": 2, "lift_percent": 8}
    text = json.dumps({"score": 70, "prioritized_backlog": [dict(item, **{field: float("nan")})]})
    assert "NaN" in text
    with pytest.raises(ModelOutputError, match=field):
        _build(repair_and_parse_json(text), mode="full")


def test_pipeline_rejects_nan_score():
    client, fake = answering('{"score": NaN, "summary": "x", "key_findings": [], "quick_wins": []}')
    with pytest.raises(ModelOutputError):
        AnalysisPipeline(settings, client, fetch=fetch_sample).run("acme.test")
