"""
Scan Models

Types shared by the retriever, rule engines, compliance mapper and the
color engine. Scan results are frozen: enrichment produces new records
instead of mutating the ones it was given.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Impact(str, Enum):
    """Accessibility issue impact levels."""
    CRITICAL = "critical"    # Blocks access entirely
    SERIOUS = "serious"      # Causes major difficulty
    MODERATE = "moderate"    # Causes some difficulty
    MINOR = "minor"          # Causes minor inconvenience

    @classmethod
    def from_raw(cls, value: str | None) -> "Impact":
        """Map an engine impact string, defaulting unknown values to minor."""
        try:
            return cls(value)
        except ValueError:
            return cls.MINOR


class OutcomeKind(str, Enum):
    """How a rule engine judged a rule."""
    VIOLATION = "violation"
    PASS = "pass"
    INCOMPLETE = "incomplete"  # Needs manual review


class ContrastLevel(str, Enum):
    """WCAG contrast conformance for a text/background pair."""
    AAA = "AAA"
    AA = "AA"
    FAIL = "Fail"


@dataclass
class RuleOutcome:
    """A single rule result as reported by a rule engine."""
    id: str
    kind: OutcomeKind
    help: str
    impact: str | None = None
    help_url: str | None = None
    nodes: list[str] = field(default_factory=list)  # HTML snippets, evaluation order
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AccessibilityIssue:
    """A violation, pass or warning, keyed by rule identifier."""
    id: str
    impact: Impact
    description: str
    help_url: str | None = None
    nodes: tuple[str, ...] = ()
    wcag_criteria: tuple[str, ...] = ()
    legislation_refs: tuple[str, ...] | None = None

    @classmethod
    def from_outcome(cls, outcome: RuleOutcome) -> "AccessibilityIssue":
        return cls(
            id=outcome.id,
            impact=Impact.from_raw(outcome.impact),
            description=outcome.help,
            help_url=outcome.help_url,
            nodes=tuple(outcome.nodes),
            wcag_criteria=(outcome.id,),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "impact": self.impact.value,
            "description": self.description,
            "helpUrl": self.help_url,
            "nodes": list(self.nodes),
            "wcagCriteria": list(self.wcag_criteria),
        }
        if self.legislation_refs is not None:
            data["legislationRefs"] = list(self.legislation_refs)
        return data


@dataclass(frozen=True)
class ScanSummary:
    """Issue counts per impact plus pass and warning counts."""
    critical: int = 0
    serious: int = 0
    moderate: int = 0
    minor: int = 0
    passes: int = 0
    warnings: int = 0

    @classmethod
    def from_issues(
        cls,
        issues: tuple[AccessibilityIssue, ...],
        passes: int = 0,
        warnings: int = 0,
    ) -> "ScanSummary":
        counts = {impact: 0 for impact in Impact}
        for issue in issues:
            counts[issue.impact] += 1
        return cls(
            critical=counts[Impact.CRITICAL],
            serious=counts[Impact.SERIOUS],
            moderate=counts[Impact.MODERATE],
            minor=counts[Impact.MINOR],
            passes=passes,
            warnings=warnings,
        )

    @property
    def total_issues(self) -> int:
        return self.critical + self.serious + self.moderate + self.minor

    def to_dict(self) -> dict[str, int]:
        return {
            "critical": self.critical,
            "serious": self.serious,
            "moderate": self.moderate,
            "minor": self.minor,
            "passes": self.passes,
            "warnings": self.warnings,
        }


@dataclass(frozen=True)
class TestResult:
    """Outcome of a single page scan."""

    __test__ = False  # keep pytest from collecting this class

    url: str
    timestamp: str  # ISO-8601
    issues: tuple[AccessibilityIssue, ...]
    passes: tuple[AccessibilityIssue, ...]
    warnings: tuple[AccessibilityIssue, ...]
    summary: ScanSummary
    legislation_compliance: dict[str, bool] | None = None
    region: str = "global"  # presentation hint only

    @property
    def enriched(self) -> bool:
        return self.legislation_compliance is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.url,
            "timestamp": self.timestamp,
            "region": self.region,
            "issues": [i.to_dict() for i in self.issues],
            "passes": [i.to_dict() for i in self.passes],
            "warnings": [i.to_dict() for i in self.warnings],
            "summary": self.summary.to_dict(),
        }
        if self.legislation_compliance is not None:
            data["legislationCompliance"] = dict(self.legislation_compliance)
        return data


@dataclass(frozen=True)
class WCAGInfo:
    """Remediation guidance for a rule or WCAG success criterion."""
    description: str
    success_criteria: str
    suggested_fix: str
    code_example: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "successCriteria": self.success_criteria,
            "suggestedFix": self.suggested_fix,
            "codeExample": self.code_example,
        }


@dataclass(frozen=True)
class ColorCombination:
    """A background color paired with its best text color."""
    background: str
    text: str
    name: str
    ratio: float
    wcag_level: ContrastLevel

    def to_dict(self) -> dict[str, Any]:
        return {
            "background": self.background,
            "text": self.text,
            "name": self.name,
            "ratio": self.ratio,
            "wcagLevel": self.wcag_level.value,
        }


@dataclass(frozen=True)
class ContrastCheck:
    """Color contrast analysis result."""
    foreground: str
    background: str
    contrast_ratio: float
    passes_aa_normal: bool
    passes_aa_large: bool
    passes_aaa_normal: bool
    passes_aaa_large: bool
