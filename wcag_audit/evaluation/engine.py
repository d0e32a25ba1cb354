"""Static-markup rule engine.

Checks a parsed document for WCAG 2.1 Level A/AA problems that can be
detected without rendering:
- Perceivable: Alt text, inline color contrast
- Operable: Link names, heading order, frame titles
- Understandable: Page language, form labels
- Robust: Button names, unique ids

Rules report under the same identifiers a browser-side engine uses, so the
knowledge base and legislation tables apply unchanged. A rendering engine
can replace this one through the RuleEngine protocol.
"""

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from bs4 import BeautifulSoup, Tag

from ..core.color import classify_level, hex_contrast_ratio
from ..models import ContrastLevel, OutcomeKind, RuleOutcome

HELP_URL_BASE = "https://dequeuniversity.com/rules/axe/4.8/"
MAX_SNIPPET = 250

NON_LABELLED_INPUT_TYPES = {"hidden", "submit", "button", "reset", "image"}
DEFAULT_PAGE_BACKGROUND = "#ffffff"

SHORT_HEX_PATTERN = re.compile(r"#([a-f\d])([a-f\d])([a-f\d])", re.IGNORECASE)
LONG_HEX_PATTERN = re.compile(r"#[a-f\d]{6}", re.IGNORECASE)
FONT_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)px")


class RuleEngine(Protocol):
    """Evaluates a normalized document; may return a list or an awaitable."""

    def evaluate(self, document: Any) -> list[RuleOutcome] | Awaitable[list[RuleOutcome]]:
        ...


@dataclass
class RuleCheck:
    """Nodes a rule applied to, and which of them failed or need review."""
    applicable: list[Tag] = field(default_factory=list)
    failed: list[Tag] = field(default_factory=list)
    incomplete: list[Tag] = field(default_factory=list)


@dataclass(frozen=True)
class Rule:
    id: str
    help: str
    impact: str
    tags: tuple[str, ...]
    check: Callable[[BeautifulSoup], RuleCheck]


def snippet(tag: Tag) -> str:
    """Outer HTML of a node, truncated for display."""
    html = str(tag)
    if len(html) > MAX_SNIPPET:
        return html[:MAX_SNIPPET] + "..."
    return html


def _non_empty(value: Any) -> bool:
    if isinstance(value, list):
        value = " ".join(value)
    return bool(value and str(value).strip())


def _labelled_by(tag: Tag, document: BeautifulSoup) -> bool:
    ids = tag.get("aria-labelledby")
    if not _non_empty(ids):
        return False
    if isinstance(ids, list):
        ids = " ".join(ids)
    for ref in ids.split():
        target = document.find(id=ref)
        if target is not None and target.get_text(strip=True):
            return True
    return False


def has_accessible_name(tag: Tag, document: BeautifulSoup) -> bool:
    """Text content, aria-label, aria-labelledby, title or an alt'd image."""
    if tag.get_text(strip=True):
        return True
    if _non_empty(tag.get("aria-label")) or _non_empty(tag.get("title")):
        return True
    if _labelled_by(tag, document):
        return True
    return any(_non_empty(img.get("alt")) for img in tag.find_all("img"))


def _check_image_alt(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    for img in document.find_all("img"):
        result.applicable.append(img)
        if img.get("role") in ("presentation", "none"):
            continue
        if img.get("alt") is None and not _non_empty(img.get("aria-label")) and not _labelled_by(img, document):
            result.failed.append(img)
    return result


def _check_html_has_lang(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    html = document.find("html")
    if html is not None:
        result.applicable.append(html)
        if not _non_empty(html.get("lang")) and not _non_empty(html.get("xml:lang")):
            result.failed.append(html)
    return result


def _check_document_title(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    html = document.find("html")
    if html is not None:
        result.applicable.append(html)
        title = document.find("title")
        if title is None or not title.get_text(strip=True):
            result.failed.append(html)
    return result


def _check_link_name(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    for link in document.find_all("a", href=True):
        result.applicable.append(link)
        if not has_accessible_name(link, document):
            result.failed.append(link)
    return result


def _check_button_name(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    for button in document.find_all("button"):
        result.applicable.append(button)
        if not has_accessible_name(button, document):
            result.failed.append(button)

    for button in document.find_all("input", attrs={"type": "button"}):
        result.applicable.append(button)
        if not _non_empty(button.get("value")) and not has_accessible_name(button, document):
            result.failed.append(button)
    return result


def _check_frame_title(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    for frame in document.find_all(["iframe", "frame"]):
        result.applicable.append(frame)
        if not (_non_empty(frame.get("title")) or _non_empty(frame.get("aria-label"))
                or _labelled_by(frame, document)):
            result.failed.append(frame)
    return result


def _is_labelled_control(control: Tag, document: BeautifulSoup) -> bool:
    control_id = control.get("id")
    if control_id and document.find("label", attrs={"for": control_id}) is not None:
        return True
    if control.find_parent("label") is not None:
        return True
    if _non_empty(control.get("aria-label")) or _non_empty(control.get("title")):
        return True
    return _labelled_by(control, document)


def _check_label(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    for control in document.find_all(["input", "select", "textarea"]):
        if control.name == "input" and control.get("type", "text").lower() in NON_LABELLED_INPUT_TYPES:
            continue
        result.applicable.append(control)
        if not _is_labelled_control(control, document):
            result.failed.append(control)
    return result


def _check_heading_order(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    previous_level = 0
    for heading in document.find_all(re.compile(r"^h[1-6]$")):
        level = int(heading.name[1])
        result.applicable.append(heading)
        if previous_level and level - previous_level > 1:
            result.failed.append(heading)
        previous_level = level
    return result


def _check_duplicate_id(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    seen: set[str] = set()
    for element in document.find_all(id=True):
        element_id = element["id"]
        result.applicable.append(element)
        if element_id in seen:
            result.failed.append(element)
        seen.add(element_id)
    return result


def _style_declarations(tag: Tag) -> dict[str, str]:
    declarations = {}
    for declaration in (tag.get("style") or "").split(";"):
        name, sep, value = declaration.partition(":")
        if sep:
            declarations[name.strip().lower()] = value.strip().lower()
    return declarations


def parse_hex_color(value: str) -> str | None:
    """Normalize '#abc' / '#aabbcc' to '#aabbcc'; anything else is None."""
    value = value.replace("!important", "").strip()
    short = SHORT_HEX_PATTERN.fullmatch(value)
    if short:
        return "#" + "".join(c * 2 for c in short.groups()).lower()
    if LONG_HEX_PATTERN.fullmatch(value):
        return value.lower()
    return None


def _inline_background(tag: Tag) -> str | None:
    """Nearest declared background, or the default page background."""
    for node in [tag, *tag.parents]:
        if not isinstance(node, Tag):
            continue
        styles = _style_declarations(node)
        value = styles.get("background-color") or styles.get("background")
        if value:
            return value
    return DEFAULT_PAGE_BACKGROUND


def _is_large_text(styles: dict[str, str]) -> bool:
    match = FONT_SIZE_PATTERN.fullmatch(styles.get("font-size", "").strip())
    if not match:
        return False
    size = float(match.group(1))
    bold = styles.get("font-weight", "") in ("bold", "bolder", "700", "800", "900")
    return size >= 24 or (bold and size >= 18.66)


def _check_color_contrast(document: BeautifulSoup) -> RuleCheck:
    result = RuleCheck()
    for element in document.find_all(style=True):
        styles = _style_declarations(element)
        if "color" not in styles:
            continue
        if not any(text.strip() for text in element.find_all(string=True, recursive=False)):
            continue

        result.applicable.append(element)
        foreground = parse_hex_color(styles["color"])
        background = parse_hex_color(_inline_background(element))
        if foreground is None or background is None:
            result.incomplete.append(element)
            continue

        ratio = hex_contrast_ratio(foreground, background)
        if classify_level(ratio, large_text=_is_large_text(styles)) == ContrastLevel.FAIL:
            result.failed.append(element)
    return result


RULES = [
    Rule("image-alt", "Images must have alternate text", "critical",
         ("wcag2a", "wcag111"), _check_image_alt),
    Rule("html-has-lang", "<html> element must have a lang attribute", "serious",
         ("wcag2a", "wcag311"), _check_html_has_lang),
    Rule("document-title", "Documents must have <title> element to aid in navigation", "serious",
         ("wcag2a", "wcag242"), _check_document_title),
    Rule("link-name", "Links must have discernible text", "serious",
         ("wcag2a", "wcag244", "wcag412"), _check_link_name),
    Rule("button-name", "Buttons must have discernible text", "critical",
         ("wcag2a", "wcag412"), _check_button_name),
    Rule("frame-title", "Frames must have an accessible name", "serious",
         ("wcag2a", "wcag412"), _check_frame_title),
    Rule("label", "Form elements must have labels", "critical",
         ("wcag2a", "wcag131", "wcag412"), _check_label),
    Rule("heading-order", "Heading levels should only increase by one", "moderate",
         ("best-practice",), _check_heading_order),
    Rule("duplicate-id", "id attribute value must be unique", "minor",
         ("wcag2a", "wcag411"), _check_duplicate_id),
    Rule("color-contrast", "Elements must meet minimum color contrast ratio thresholds", "serious",
         ("wcag2aa", "wcag143"), _check_color_contrast),
]


class HeuristicRuleEngine:
    """
    Rule engine that inspects static markup only.

    A rule with failing nodes is a violation, one with nodes needing review
    is incomplete, and one whose applicable nodes all passed is a pass.
    Rules with no applicable nodes are left out.
    """

    def __init__(self, rules: list[Rule] | None = None):
        self.rules = rules if rules is not None else RULES

    def evaluate(self, document: BeautifulSoup) -> list[RuleOutcome]:
        outcomes = []
        for rule in self.rules:
            check = rule.check(document)
            if not check.applicable:
                continue

            if check.failed:
                outcomes.append(self._outcome(rule, OutcomeKind.VIOLATION, check.failed, rule.impact))
            if check.incomplete:
                outcomes.append(self._outcome(rule, OutcomeKind.INCOMPLETE, check.incomplete, rule.impact))
            if not check.failed and not check.incomplete:
                outcomes.append(self._outcome(rule, OutcomeKind.PASS, check.applicable, None))
        return outcomes

    def _outcome(self, rule: Rule, kind: OutcomeKind, nodes: list[Tag], impact: str | None) -> RuleOutcome:
        return RuleOutcome(
            id=rule.id,
            kind=kind,
            help=rule.help,
            impact=impact,
            help_url=f"{HELP_URL_BASE}{rule.id}",
            nodes=[snippet(node) for node in nodes],
            tags=list(rule.tags),
        )
