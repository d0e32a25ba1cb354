"""Markup normalization and rule evaluation."""

from .engine import HeuristicRuleEngine, RuleEngine
from .normalizer import HtmlNormalizer, MarkupNormalizer

__all__ = [
    "HeuristicRuleEngine",
    "HtmlNormalizer",
    "MarkupNormalizer",
    "RuleEngine",
]
