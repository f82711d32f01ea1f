"""
Shared fakes for the CRO audit test suite.

Nothing here talks to the network: the Anthropic SDK client and the page
fetcher are replaced with scripted stand-ins.
"""

import json
import time
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from analyzer.fetcher import FetchedPage, PageFetchError
from utils.clients.anthropic import CROModelClient, FallbackPolicy

MESSAGES_URL = "https://api.anthropic.com/v1/messages"
CANDIDATES = ("claude-primary", "claude-secondary", "claude-tertiary")

SAMPLE_HTML = """<!doctype html>
<html>
<head>
  <title>Acme Analytics | Dashboards for busy teams</title>
  <meta name="description" content="Acme turns raw events into dashboards your team will read.">
  <link rel="canonical" href="https://acme.test/">
  <style>body { color: red; }</style>
  <script>window.track = function () {};</script>
</head>
<body>
  <header><a href="/">Home</a> <a href="/pricing">Pricing</a></header>
  <section>
    <h1>Dashboards that <b>answer</b> questions</h1>
    <p>Start free trial today. Built for product teams so you can ship faster.</p>
    <img src="hero.png" alt="Dashboard preview">
    <img src="logo.png">
  </section>
  <section>
    <h2>Features</h2>
    <p>Integrations with every warehouse.</p>
    <h3>How it works</h3>
  </section>
  <section>
    <h2>Trusted by 4,000 customers</h2>
    <p>"Best tool we bought this year" &amp; other testimonials.</p>
  </section>
  <section>
    <h2>Pricing</h2>
    <p>$49 per month, billed annually.</p>
  </section>
  <section>
    <h2>Frequently asked questions</h2>
  </section>
  <footer>
    <a href="https://twitter.com/acme">Twitter</a>
    <a href="https://acme.test/privacy">Privacy policy</a>
    &copy; 2024 Acme. All rights reserved.
  </footer>
</body>
</html>
"""

FREE_REPORT_JSON = {
    "score": 72,
    "summary": "Clear headline, but the call to action is buried below the fold.",
    "key_findings": [
        {"title": "CTA below the fold", "impact": "high", "recommendation": "Move the trial button into the hero."},
        {"title": "No pricing anchor", "impact": "medium", "recommendation": "Show the starting price near the CTA."},
    ],
    "quick_wins": ["Add a primary button to the hero", "Shorten the meta description"],
}

FULL_REPORT_JSON = dict(
    FREE_REPORT_JSON,
    prioritized_backlog=[
        {"title": "Hero CTA", "impact": "high", "effort": "low", "eta_days": 2, "lift_percent": 8},
        {"title": "Pricing teaser", "impact": 2, "effort": "medium", "eta_days": 45},
    ],
    content_audit=[
        {"section": "Social Proof", "status": "weak", "rationale": "Logos only.", "suggestions": ["Add a quote"]},
    ],
)


def status_error(cls, status: int, message: str):
    """Build an anthropic APIStatusError subclass the way the SDK does"""
    response = httpx.Response(status, request=httpx.Request("POST", MESSAGES_URL))
    return cls(message, response=response, body=None)


def not_found(model: str):
    return status_error(anthropic.NotFoundError, 404, f"model: {model} not found")


class FakeAnthropic:
    """
    Scripted stand-in for ``anthropic.Anthropic``.

    ``outcomes`` maps a model id to either the text it answers with or the
    exception it raises. ``delay`` sleeps inside create() to simulate a slow
    model call.
    """

    def __init__(self, outcomes, delay: float = 0.0):
        self.outcomes = outcomes
        self.delay = delay
        self.calls = []
        self.messages = self

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            time.sleep(self.delay)
        outcome = self.outcomes[kwargs["model"]]
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=outcome)])

    @property
    def models_called(self):
        return [c["model"] for c in self.calls]


def make_model_client(outcomes, candidates=CANDIDATES, delay: float = 0.0, api_key: str = "test-key"):
    fake = FakeAnthropic(outcomes, delay=delay)
    client = CROModelClient(api_key, FallbackPolicy(candidates=tuple(candidates)), client=fake)
    return client, fake


def answering(text, candidates=CANDIDATES, **kwargs):
    """Model client whose first candidate answers ``text``"""
    if isinstance(text, dict):
        text = json.dumps(text)
    return make_model_client({candidates[0]: text}, candidates=candidates, **kwargs)


def fetch_sample(url, *args, **kwargs):
    return FetchedPage(url=url, final_url=url, status=200, html=SAMPLE_HTML)


def fetch_not_found(url, *args, **kwargs):
    raise PageFetchError("Could not fetch page (HTTP 404)", status=404)


def parse_sse(body: str):
    """Split an event-stream body into (event, data) pairs"""
    events = []
    for frame in body.split("\n\n"):
        if not frame.strip():
            continue
        event, data = None, None
        for line in frame.split("\n"):
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        events.append((event, data))
    return events


@pytest.fixture
def sample_html():
    return SAMPLE_HTML
