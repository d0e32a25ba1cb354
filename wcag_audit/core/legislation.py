"""Legislation compliance mapping for scan results.

Maps violated rules and criteria to jurisdictional citations and computes a
pass/fail matrix per jurisdiction. A jurisdiction passes unless one of its
required identifiers was violated; with a partially populated table that
is an approximation, not a legal certification.
"""

from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType

from ..models import AccessibilityIssue, TestResult
from .knowledge import criterion_number


class Jurisdiction(str, Enum):
    """Legal or regulatory regimes with their own citation formats."""
    ADA = "ada"
    SECTION_508 = "section508"
    AODA = "aoda"
    EN_301_549 = "en301549"
    EEA = "eea"


@dataclass(frozen=True)
class LegislationMapping:
    """WCAG criteria behind a rule, with citations per jurisdiction."""
    criteria: tuple[str, ...]
    standards: MappingProxyType


def _mapping(criteria: tuple[str, ...], **standards: tuple[str, ...]) -> LegislationMapping:
    return LegislationMapping(criteria=criteria, standards=MappingProxyType(standards))


LEGISLATION_MAPPINGS = MappingProxyType({
    "color-contrast": _mapping(
        ("1.4.3",),
        ada=("36 CFR 1194.31(b)",),
        section508=("502.3.1",),
        aoda=("WCAG 2.0 Level AA",),
        en301549=("9.1.4.3",),
        eea=("EN 301 549 V3.2.1",),
    ),
    "image-alt": _mapping(
        ("1.1.1",),
        ada=("36 CFR 1194.22(a)",),
        section508=("502.2",),
        aoda=("WCAG 2.0 Level A",),
        en301549=("9.1.1.1",),
        eea=("EN 301 549 V3.2.1",),
    ),
    "html-has-lang": _mapping(
        ("3.1.1",),
        ada=("36 CFR 1194.22(m)",),
        section508=("504.2",),
        aoda=("WCAG 2.0 Level A",),
        en301549=("9.3.1.1",),
        eea=("EN 301 549 V3.2.1",),
    ),
})


@dataclass(frozen=True)
class Region:
    """A presentation region and the standards shown for it."""
    id: str
    name: str
    standards: tuple[str, ...]
    jurisdictions: tuple[Jurisdiction, ...]


REGIONS = MappingProxyType({
    "eu": Region("eu", "European Union", ("WCAG 2.1", "EN 301 549", "EEA"),
                 (Jurisdiction.EN_301_549, Jurisdiction.EEA)),
    "global": Region("global", "Global Standards", ("WCAG 2.1", "ISO/IEC 40500"), ()),
    "usa": Region("usa", "United States", ("WCAG 2.1", "ADA", "Section 508"),
                  (Jurisdiction.ADA, Jurisdiction.SECTION_508)),
    "canada": Region("canada", "Canada", ("WCAG 2.1", "AODA"), (Jurisdiction.AODA,)),
})


def jurisdictions_for_region(region: str) -> tuple[Jurisdiction, ...]:
    """All jurisdictions, the region's own first. Unknown regions keep table order."""
    preferred = REGIONS[region].jurisdictions if region in REGIONS else ()
    rest = tuple(j for j in Jurisdiction if j not in preferred)
    return preferred + rest


def _normalize(identifier: str) -> str:
    return criterion_number(identifier)


def required_criteria(jurisdiction: Jurisdiction) -> frozenset[str]:
    """Every identifier a jurisdiction requires, across the whole table.

    Both the table key (the rule identifier) and its WCAG criteria count,
    so a violation reported under either name is caught.
    """
    required = set()
    for key, mapping in LEGISLATION_MAPPINGS.items():
        if jurisdiction.value in mapping.standards:
            required.add(_normalize(key))
            required.update(_normalize(c) for c in mapping.criteria)
    return frozenset(required)


def violated_criteria(issues: tuple[AccessibilityIssue, ...]) -> frozenset[str]:
    return frozenset(
        _normalize(criterion)
        for issue in issues
        for criterion in issue.wcag_criteria
    )


def check_legislation_compliance(issues: tuple[AccessibilityIssue, ...]) -> dict[str, bool]:
    """Compliance per jurisdiction; vacuously true with no required criteria."""
    violations = violated_criteria(issues)
    return {
        jurisdiction.value: required_criteria(jurisdiction).isdisjoint(violations)
        for jurisdiction in Jurisdiction
    }


def mappings_for(identifier: str) -> list[LegislationMapping]:
    """Table entries keyed by, or listing, an identifier (after normalizing)."""
    wanted = _normalize(identifier)
    return [
        mapping
        for key, mapping in LEGISLATION_MAPPINGS.items()
        if _normalize(key) == wanted or wanted in {_normalize(c) for c in mapping.criteria}
    ]


def legislation_refs_for(issue: AccessibilityIssue) -> tuple[str, ...]:
    """Citations reachable from an issue's criteria, e.g. 'ADA: 36 CFR 1194.31(b)'."""
    refs: dict[str, None] = {}
    for criterion in issue.wcag_criteria:
        for mapping in mappings_for(criterion):
            for standard, requirements in mapping.standards.items():
                for requirement in requirements:
                    refs[f"{standard.upper()}: {requirement}"] = None
    return tuple(refs)


def add_legislation_refs(result: TestResult) -> TestResult:
    """Return a copy of the result with citations and the compliance matrix.

    Recomputed from each issue's wcag_criteria, so enriching an already
    enriched result gives the same output.
    """
    issues = tuple(
        replace(issue, legislation_refs=legislation_refs_for(issue))
        for issue in result.issues
    )
    return replace(
        result,
        issues=issues,
        legislation_compliance=check_legislation_compliance(result.issues),
    )
