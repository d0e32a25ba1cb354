"""Remediation recommendations from a text-generation model.

Each issue gets a short explanation, a fix, a code example and resource
links. The model's markdown is split into those sections by heading or
numbered-item keywords. Failures never propagate: the caller always gets a
displayable recommendation, falling back to WCAG reference links.
"""

import re
from dataclasses import dataclass, field

import anthropic
import structlog

from ..config import Settings, get_settings
from ..models import AccessibilityIssue

logger = structlog.get_logger(__name__)

WCAG_QUICKREF_URL = "https://www.w3.org/WAI/WCAG21/quickref/"
WAI_TIPS_URL = "https://www.w3.org/WAI/tips/"

URL_PATTERN = re.compile(r"https?://[^\s)]+")
HEADING_PATTERN = re.compile(r"^#+\s")
NUMBERED_PATTERN = re.compile(r"^\d+\.")

SYSTEM_PROMPT = "You are a WCAG expert. Provide brief, practical accessibility fixes."


@dataclass
class AIRecommendation:
    """Model-written guidance for a single issue."""
    explanation: str = ""
    suggested_fix: str = ""
    code_example: str = ""
    additional_resources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "explanation": self.explanation,
            "suggestedFix": self.suggested_fix,
            "codeExample": self.code_example,
            "additionalResources": self.additional_resources,
        }


def build_prompt(issue: AccessibilityIssue) -> str:
    criterion = issue.wcag_criteria[0] if issue.wcag_criteria else "N/A"
    return f"""WCAG Issue Analysis:
- Description: {issue.description}
- Impact: {issue.impact.value}
- WCAG: {criterion}

Provide:
1. Brief issue explanation (2-3 sentences)
2. Concise fix solution (2-3 steps)
3. Simple code example
4. One key resource URL"""


def determine_section(text: str) -> str:
    """Map a heading or list item to the section it introduces."""
    lower = text.lower()
    if "explanation" in lower or "why" in lower or "issue" in lower:
        return "explanation"
    if "fix" in lower or "solution" in lower or "steps" in lower:
        return "suggested_fix"
    if "code" in lower or "example" in lower:
        return "code_example"
    if "resource" in lower or "reference" in lower or "url" in lower:
        return "additional_resources"
    return ""


def parse_ai_response(markdown: str) -> AIRecommendation:
    """Split a markdown answer into recommendation sections."""
    sections = {"explanation": [], "suggested_fix": [], "code_example": []}
    resources: list[str] = []
    current = ""
    in_code_block = False

    for line in markdown.split("\n"):
        stripped = line.strip()

        if stripped.startswith("```"):
            in_code_block = not in_code_block
            if in_code_block:
                current = "code_example"
            continue

        if not in_code_block and (HEADING_PATTERN.match(stripped) or NUMBERED_PATTERN.match(stripped)):
            current = determine_section(stripped)
            continue

        if not current or not stripped:
            continue

        if current == "additional_resources":
            resources.extend(URL_PATTERN.findall(stripped))
        else:
            sections[current].append(stripped)

    return AIRecommendation(
        explanation="\n".join(sections["explanation"]).strip(),
        suggested_fix="\n".join(sections["suggested_fix"]).strip(),
        code_example="\n".join(sections["code_example"]).strip(),
        additional_resources=resources,
    )


def fallback_recommendation(issue: AccessibilityIssue, message: str) -> AIRecommendation:
    return AIRecommendation(
        explanation=message,
        suggested_fix="Please refer to the WCAG documentation for guidance.",
        code_example="",
        additional_resources=[issue.help_url or WCAG_QUICKREF_URL, WAI_TIPS_URL],
    )


class RecommendationAssistant:
    """
    Generates per-issue remediation prose with Claude.

    Usage:
        assistant = RecommendationAssistant()
        recommendation = await assistant.recommend(issue)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self.log = logger.bind(model=self.settings.recommendation_model)

    @property
    def client(self) -> anthropic.AsyncAnthropic | None:
        """Lazy-initialize the async Anthropic client; None without a key."""
        if self._client is None and self.settings.anthropic_api_key is not None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key.get_secret_value()
            )
        return self._client

    async def recommend(self, issue: AccessibilityIssue) -> AIRecommendation:
        """Ask the model about one issue; returns a fallback on any API failure."""
        client = self.client
        if client is None:
            self.log.warning("Recommendation requested without API key", issue_id=issue.id)
            return fallback_recommendation(issue, "Unable to generate AI recommendations at this time.")

        try:
            response = await client.messages.create(
                model=self.settings.recommendation_model,
                max_tokens=self.settings.recommendation_max_tokens,
                temperature=0.7,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_prompt(issue)}],
            )
        except anthropic.AuthenticationError as e:
            self.log.error("Recommendation request rejected", issue_id=issue.id, error=str(e))
            return fallback_recommendation(
                issue, "The Anthropic API key is invalid or not properly configured."
            )
        except anthropic.BadRequestError as e:
            self.log.error("Recommendation request invalid", issue_id=issue.id, error=str(e))
            message = "Unable to generate AI recommendations at this time."
            if "too long" in str(e).lower() or "context" in str(e).lower():
                message = ("The issue description is too long for AI analysis. "
                           "Please try with a simpler description.")
            return fallback_recommendation(issue, message)
        except anthropic.APIError as e:
            self.log.error("Recommendation request failed", issue_id=issue.id, error=str(e))
            return fallback_recommendation(issue, "Unable to generate AI recommendations at this time.")

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "text") == "text"
        )
        parsed = parse_ai_response(text)

        return AIRecommendation(
            explanation=parsed.explanation or "No explanation available.",
            suggested_fix=parsed.suggested_fix or "No fix suggestion available.",
            code_example=parsed.code_example,
            additional_resources=parsed.additional_resources or [issue.help_url or WCAG_QUICKREF_URL],
        )
