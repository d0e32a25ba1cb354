"""Accessibility scan pipeline.

Drives one scan through validate -> retrieve -> normalize -> evaluate ->
classify -> enrich. Callers get either a fully enriched TestResult or a
single ScanError with a message ready for display; partial results are
never returned.
"""

import asyncio
import inspect
import time
import uuid
from datetime import UTC, datetime
from enum import Enum

import structlog

from .config import Settings, get_settings
from .core.legislation import add_legislation_refs
from .errors import (
    TIMEOUT_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    AbortedByTimeoutError,
    EvaluationError,
    ScanError,
)
from .evaluation.engine import HeuristicRuleEngine, RuleEngine
from .evaluation.normalizer import HtmlNormalizer, MarkupNormalizer
from .models import AccessibilityIssue, OutcomeKind, RuleOutcome, ScanSummary, TestResult
from .retrieval.fetcher import PageRetriever, validate_url
from .utils.logging import LogContext, ScanLogger

logger = structlog.get_logger(__name__)


class ScanState(str, Enum):
    """Stages of a single scan."""
    IDLE = "idle"
    VALIDATING = "validating"
    RETRIEVING = "retrieving"
    NORMALIZING = "normalizing"
    EVALUATING = "evaluating"
    CLASSIFYING = "classifying"
    ENRICHED = "enriched"
    FAILED = "failed"


def classify_outcomes(url: str, outcomes: list[RuleOutcome], region: str = "global") -> TestResult:
    """Partition engine outcomes into issues, passes and warnings, with counts."""
    issues = tuple(AccessibilityIssue.from_outcome(o) for o in outcomes if o.kind == OutcomeKind.VIOLATION)
    passes = tuple(AccessibilityIssue.from_outcome(o) for o in outcomes if o.kind == OutcomeKind.PASS)
    warnings = tuple(AccessibilityIssue.from_outcome(o) for o in outcomes if o.kind == OutcomeKind.INCOMPLETE)

    return TestResult(
        url=url,
        timestamp=datetime.now(UTC).isoformat(),
        issues=issues,
        passes=passes,
        warnings=warnings,
        summary=ScanSummary.from_issues(issues, passes=len(passes), warnings=len(warnings)),
        region=region,
    )


class ScanRun:
    """State of one scan; every scan gets its own."""

    def __init__(self, url: str):
        self.scan_id = str(uuid.uuid4())
        self.url = url
        self.state = ScanState.IDLE
        self.tracker = ScanLogger(self.scan_id, url)

    def advance(self, state: ScanState) -> None:
        self.state = state
        self.tracker.transition(state.value)


class AccessibilityScanner:
    """
    Runs accessibility scans end to end.

    Collaborators are injectable: a PageRetriever, a MarkupNormalizer and a
    RuleEngine. Scanner instances hold no per-scan state, so concurrent
    scans may share one.

    Usage:
        async with AccessibilityScanner() as scanner:
            result = await scanner.scan("https://example.com", region="eu")
    """

    def __init__(
        self,
        retriever: PageRetriever | None = None,
        normalizer: MarkupNormalizer | None = None,
        engine: RuleEngine | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.retriever = retriever or PageRetriever(self.settings.retriever_config())
        self.normalizer = normalizer or HtmlNormalizer()
        self.engine = engine or HeuristicRuleEngine()

    async def __aenter__(self) -> "AccessibilityScanner":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.retriever.close()

    async def scan(self, url: str, region: str = "global") -> TestResult:
        """
        Scan a page and map its violations to legislation.

        Args:
            url: Absolute http(s) URL to scan
            region: Presentation hint; compliance covers every jurisdiction

        Returns:
            Enriched TestResult

        Raises:
            ScanError: The single failure signal, message ready for display
        """
        run = ScanRun(url)
        start = time.monotonic()

        with LogContext(scan_id=run.scan_id, url=url):
            try:
                result = await self._run(run, url, region)
            except ScanError as e:
                last_state = run.state.value
                run.advance(ScanState.FAILED)
                run.tracker.scan_failed(e.kind, e.message, last_state)
                raise

            run.tracker.scan_completed(
                issues=len(result.issues),
                passes=len(result.passes),
                warnings=len(result.warnings),
                duration_ms=int((time.monotonic() - start) * 1000),
            )
            return result

    async def _run(self, run: ScanRun, url: str, region: str) -> TestResult:
        run.advance(ScanState.VALIDATING)
        url = validate_url(url)

        run.advance(ScanState.RETRIEVING)
        html = await self.retriever.retrieve(url)

        try:
            run.advance(ScanState.NORMALIZING)
            document = self.normalizer.normalize(html)

            run.advance(ScanState.EVALUATING)
            outcomes = await self._evaluate(document)
        except TimeoutError as e:
            raise AbortedByTimeoutError(TIMEOUT_MESSAGE) from e
        except Exception as e:
            logger.exception("Evaluation failed", error=str(e))
            raise EvaluationError(UNEXPECTED_ERROR_MESSAGE) from e

        run.advance(ScanState.CLASSIFYING)
        classified = classify_outcomes(url, outcomes, region)

        enriched = add_legislation_refs(classified)
        run.advance(ScanState.ENRICHED)
        return enriched

    async def _evaluate(self, document) -> list[RuleOutcome]:
        outcomes = self.engine.evaluate(document)
        if inspect.isawaitable(outcomes):
            outcomes = await asyncio.wait_for(outcomes, timeout=self.settings.evaluation_timeout_seconds)
        return list(outcomes)


async def scan(url: str, region: str = "global") -> TestResult:
    """Scan a page with default collaborators."""
    async with AccessibilityScanner() as scanner:
        return await scanner.scan(url, region)
