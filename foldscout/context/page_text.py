"""
Page Text Access

Narrow interface over a parsed HTML document so keyword extraction never
touches markup directly. Backed by BeautifulSoup with the stdlib parser;
comments, CDATA, scripts and styles are removed before any text is read.
"""

import logging
import re
from typing import List

from bs4 import BeautifulSoup, CData, Comment

logger = logging.getLogger(__name__)

# Elements whose text is never visible page copy
NON_CONTENT_TAGS = ["script", "style", "noscript", "template", "svg", "iframe"]

# Meta tags carrying a page description or title
META_SELECTORS = [
    'meta[name="description" i]',
    'meta[property="og:description" i]',
    'meta[name="twitter:description" i]',
    'meta[property="og:title" i]',
    'meta[name="twitter:title" i]',
]


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


class PageText:
    """
    Read-only text view of one HTML page.

    Usage:
        page = PageText(html)
        title = page.extract_text("title")
        headings = page.extract_texts("h1, h2, h3")
    """

    def __init__(self, html: str):
        self._soup = self._parse(html or "")

    @staticmethod
    def _parse(html: str) -> BeautifulSoup:
        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as e:
            # html.parser gives up on some pathological input
            logger.warning(f"Could not parse page HTML, treating as empty: {e}")
            return BeautifulSoup("", "html.parser")

        for node in soup.find_all(string=lambda s: isinstance(s, (Comment, CData))):
            node.extract()
        for tag in soup.find_all(NON_CONTENT_TAGS):
            tag.decompose()

        return soup

    def extract_text(self, selector: str) -> str:
        """Text of the first element matching a CSS selector, or ""."""
        texts = self.extract_texts(selector, limit=1)
        return texts[0] if texts else ""

    def extract_texts(self, selector: str, limit: int = 0) -> List[str]:
        """Non-empty texts of all elements matching a CSS selector."""
        texts = []
        try:
            elements = self._soup.select(selector)
        except Exception as e:
            logger.debug(f"Selector '{selector}' failed: {e}")
            return texts

        for element in elements:
            text = _clean(element.get_text(" "))
            if text:
                texts.append(text)
                if limit and len(texts) >= limit:
                    break
        return texts

    def extract_attributes(self, selector: str, attribute: str) -> List[str]:
        """Non-empty values of an attribute on all elements matching a selector."""
        values = []
        try:
            elements = self._soup.select(selector)
        except Exception as e:
            logger.debug(f"Selector '{selector}' failed: {e}")
            return values

        for element in elements:
            value = element.get(attribute)
            if isinstance(value, list):
                value = " ".join(value)
            value = _clean(value or "")
            if value:
                values.append(value)
        return values

    def meta_texts(self) -> List[str]:
        """Description and title meta content, including Open Graph and Twitter variants."""
        values = []
        for selector in META_SELECTORS:
            values.extend(self.extract_attributes(selector, "content"))
        return values

    def body_text(self) -> str:
        """All visible text of the page."""
        root = self._soup.body or self._soup
        return _clean(root.get_text(" "))
