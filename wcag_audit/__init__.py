"""Web page accessibility auditing.

Scans a URL against WCAG 2.1 rules, maps violations to the legislation they
implicate, and generates WCAG-compliant color combinations.
"""

from .core.color import generate_accessible_palette
from .errors import ScanError
from .models import AccessibilityIssue, ColorCombination, Impact, TestResult, WCAGInfo
from .scanner import AccessibilityScanner, ScanState, scan

__version__ = "0.1.0"

__all__ = [
    "AccessibilityIssue",
    "AccessibilityScanner",
    "ColorCombination",
    "Impact",
    "ScanError",
    "ScanState",
    "TestResult",
    "WCAGInfo",
    "generate_accessible_palette",
    "scan",
]
