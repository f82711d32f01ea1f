import pytest

from analyzer.copywriting import augment_copy, copy_example, normalize_copy_rows
from analyzer.fetcher import PageFetchError
from api.models import CopyExampleRequest, CopyMeta
from conftest import answering, fetch_not_found, fetch_sample
from utils.clients.anthropic import MissingCredentialError
from utils.parsing.json import ModelOutputError


def _rows(n):
    return [
        {"field": f"field{i}", "current": "old", "recommended": f"new {i}", "priority": "medium", "lift_percent": 40}
        for i in range(n)
    ]


def test_rows_are_capped_and_clamped():
    rows = normalize_copy_rows(_rows(7))
    assert len(rows) == 5
    assert all(r.lift_percent == 12 for r in rows)
    assert all(r.priority == "med" for r in rows)


def test_rows_without_recommendation_are_skipped():
    raw = ["not a row", {"field": "title", "recommended": "  "}, {"field": "h1", "recommended": "Ship faster"}]
    rows = normalize_copy_rows(raw)
    assert [r.field for r in rows] == ["h1"]


@pytest.mark.parametrize(
    "priority, lift, expected",
    [("HIGH", -4, ("high", 0)), ("low", 3.6, ("low", 4)), ("urgent", "big", ("med", 0))],
)
def test_priority_and_lift_mapping(priority, lift, expected):
    row = normalize_copy_rows([{"field": "title", "recommended": "x", "priority": priority, "lift_percent": lift}])[0]
    assert (row.priority, row.lift_percent) == expected


def test_augment_copy_uses_page_copy():
    client, fake = answering({"rows": _rows(2)})
    rows = augment_copy(client, "acme.test", fetch=fetch_sample)
    assert len(rows) == 2
    prompt = fake.calls[0]["messages"][0]["content"]
    assert "Acme Analytics | Dashboards for busy teams" in prompt
    assert "Dashboards that answer questions" in prompt
    assert fake.calls[0]["temperature"] == 0.6


def test_explicit_meta_wins():
    client, fake = answering({"rows": []})
    augment_copy(client, "acme.test", CopyMeta(title="Custom title"), fetch=fetch_sample)
    assert "Custom title" in fake.calls[0]["messages"][0]["content"]


def test_rows_must_be_a_list():
    client, fake = answering({"rows": "none"})
    with pytest.raises(ModelOutputError):
        augment_copy(client, "acme.test", fetch=fetch_sample)


def test_missing_key_fails_before_fetch():
    client, fake = answering({"rows": []}, api_key="")
    with pytest.raises(MissingCredentialError):
        augment_copy(client, "acme.test", fetch=fetch_not_found)


def test_fetch_failure_propagates():
    client, fake = answering({"rows": []})
    with pytest.raises(PageFetchError):
        augment_copy(client, "acme.test", fetch=fetch_not_found)


def test_copy_example():
    client, fake = answering("  Dashboards your whole team reads  ")
    request = CopyExampleRequest(field="h1", current="Dashboards", recommended="Lead with the outcome")
    assert copy_example(client, request) == "Dashboards your whole team reads"
    assert fake.calls[0]["max_tokens"] == 400
    assert "Lead with the outcome" in fake.calls[0]["messages"][0]["content"]



@pytest.mark.parametrize("lift", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_lift_is_invalid_output(lift):
    with pytest.raises(ModelOutputError, match="lift_percent"):
        normalize_copy_rows([{"field": "title", "recommended": "x", "lift_percent": lift}])


def test_augment_copy_rejects_infinite_lift():
    client, fake = answering('{"rows": [{"field": "title", "recommended": "b", "lift_percent": Infinity}]}')
    with pytest.raises(ModelOutputError):
        augment_copy(client, "acme.test", fetch=fetch_sample)
