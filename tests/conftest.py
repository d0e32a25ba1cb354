"""Shared fixtures for accessibility auditor tests."""

import os

import httpx
import pytest


# Keep a developer's real key out of tests
os.environ.pop("ANTHROPIC_API_KEY", None)

TEST_PROXIES = [
    "https://proxy-a.test/raw?url=",
    "https://proxy-b.test/v1/proxy?quest=",
    "https://proxy-c.test/",
]

SAMPLE_HTML = """<!DOCTYPE html>
<html lang="en">
  <head><title>Sample Page</title></head>
  <body>
    <main>
      <h1>Welcome</h1>
      <img src="logo.png" alt="Company logo">
      <a href="/about">About us</a>
    </main>
  </body>
</html>"""


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "10")


@pytest.fixture
def retriever_config():
    """Retriever configuration with three fake proxies."""
    from wcag_audit.config import RetrieverConfig

    return RetrieverConfig(
        timeout_seconds=0.5,
        max_retries=3,
        backoff_base_seconds=1.0,
        proxies=list(TEST_PROXIES),
    )


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


class RecordingHandler:
    """MockTransport handler that records requests and delegates responses."""

    def __init__(self, respond):
        self.respond = respond
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.respond(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def count(self) -> int:
        return len(self.requests)


@pytest.fixture
def make_client():
    """Build an httpx.AsyncClient backed by a recording MockTransport."""
    def factory(respond):
        handler = RecordingHandler(respond)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return client, handler

    return factory


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def sample_outcomes():
    """Engine outcomes covering every outcome kind."""
    from wcag_audit.models import OutcomeKind, RuleOutcome

    return [
        RuleOutcome(
            id="color-contrast",
            kind=OutcomeKind.VIOLATION,
            help="Elements must meet minimum color contrast ratio thresholds",
            impact="serious",
            help_url="https://dequeuniversity.com/rules/axe/4.8/color-contrast",
            nodes=['<p style="color: #cccccc">Faint</p>'],
        ),
        RuleOutcome(
            id="image-alt",
            kind=OutcomeKind.VIOLATION,
            help="Images must have alternate text",
            impact="critical",
            nodes=['<img src="a.png">', '<img src="b.png">'],
        ),
        RuleOutcome(
            id="region",
            kind=OutcomeKind.VIOLATION,
            help="All page content should be contained by landmarks",
            impact="weird",
            nodes=["<div>Loose content</div>"],
        ),
        RuleOutcome(
            id="document-title",
            kind=OutcomeKind.PASS,
            help="Documents must have <title> element to aid in navigation",
        ),
        RuleOutcome(
            id="link-name",
            kind=OutcomeKind.INCOMPLETE,
            help="Links must have discernible text",
            impact="serious",
            nodes=['<a href="#"><span></span></a>'],
        ),
    ]


@pytest.fixture
def make_result():
    """Build an unenriched TestResult from issue specs."""
    from wcag_audit.models import AccessibilityIssue, Impact, ScanSummary, TestResult

    def factory(*criteria_lists, impact=Impact.SERIOUS):
        issues = tuple(
            AccessibilityIssue(
                id=criteria[0] if criteria else f"rule-{i}",
                impact=impact,
                description="Test issue",
                nodes=("<div></div>",),
                wcag_criteria=tuple(criteria),
            )
            for i, criteria in enumerate(criteria_lists)
        )
        return TestResult(
            url="https://example.com",
            timestamp="2026-01-01T00:00:00+00:00",
            issues=issues,
            passes=(),
            warnings=(),
            summary=ScanSummary.from_issues(issues),
        )

    return factory
