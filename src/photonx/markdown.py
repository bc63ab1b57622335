"""HTML to Markdown conversion.

Thin adapter over BeautifulSoup (preprocessing) and markdownify (rendering).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup
from markdownify import ATX, markdownify

from photonx.errors import ConversionFailedError

logger = logging.getLogger(__name__)

# Never rendered, regardless of options.
_ALWAYS_DROPPED_TAGS = ("script", "style", "template")

# "Aggressive" structural-noise preset used when clean_content is enabled.
_NOISE_TAGS = (
    "nav",
    "form",
    "header",
    "footer",
    "aside",
    "button",
    "input",
    "select",
    "textarea",
    "iframe",
    "noscript",
)
_NOISE_ROLES = frozenset({"navigation", "banner", "contentinfo", "search", "form"})

_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class ConversionOptions:
    """Options for HTML to Markdown conversion."""

    # Remove navigation elements, forms, headers, footers.
    clean_content: bool = False
    # Omit images entirely instead of emitting image links.
    skip_images: bool = False


def html_to_markdown(html: str, options: ConversionOptions | None = None) -> str:
    """Convert ``html`` to Markdown.

    Raises:
        ConversionFailedError: If the input is not text or conversion fails.
    """
    if not isinstance(html, str):
        raise ConversionFailedError(f"Conversion error: expected HTML text, got {type(html).__name__}")
    options = options or ConversionOptions()

    try:
        soup = BeautifulSoup(html, "html.parser")
        _strip_tags(soup, _ALWAYS_DROPPED_TAGS)
        if options.clean_content:
            _strip_noise(soup)

        markdown = markdownify(
            str(soup),
            heading_style=ATX,
            bullets="-",
            strip=["img"] if options.skip_images else None,
        )
    except (ValueError, TypeError, RecursionError) as exc:
        raise ConversionFailedError(f"Conversion error: {exc}") from exc

    markdown = _EXCESS_BLANK_LINES.sub("\n\n", markdown).strip()
    logger.debug(
        "Converted %d chars of HTML to %d chars of Markdown (clean_content=%s, skip_images=%s)",
        len(html),
        len(markdown),
        options.clean_content,
        options.skip_images,
    )
    return markdown + "\n" if markdown else ""


def _strip_tags(soup: BeautifulSoup, names: tuple[str, ...]) -> None:
    for element in soup.find_all(list(names)):
        # Nested matches go away with their ancestor.
        if not element.decomposed:
            element.decompose()


def _strip_noise(soup: BeautifulSoup) -> None:
    _strip_tags(soup, _NOISE_TAGS)
    for element in soup.find_all(attrs={"role": True}):
        if element.decomposed:
            continue
        if str(element.get("role", "")).strip().lower() in _NOISE_ROLES:
            element.decompose()
