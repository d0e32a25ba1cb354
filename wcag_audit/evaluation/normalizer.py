"""Markup normalization: raw HTML text to a document tree for rule engines."""

from typing import Any, Protocol

from bs4 import BeautifulSoup


class MarkupNormalizer(Protocol):
    """Anything that turns raw HTML into a document a rule engine accepts."""

    def normalize(self, html: str) -> Any:
        ...


class HtmlNormalizer:
    """Parses HTML with BeautifulSoup's built-in parser; unclosed tags are closed."""

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def normalize(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, self.parser)
