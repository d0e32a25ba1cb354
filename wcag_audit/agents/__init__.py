"""Text-generation helpers layered on top of scan results."""

from .recommendations import AIRecommendation, RecommendationAssistant, parse_ai_response

__all__ = [
    "AIRecommendation",
    "RecommendationAssistant",
    "parse_ai_response",
]
