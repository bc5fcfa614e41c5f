# alt_text_bot/rules/alt_text.py

import logging
import re
from typing import List, Optional

from ..schemas import DefectCategory, MediaElement, MediaKind, ScanReport

logger = logging.getLogger("alt_text_bot.rules.alt_text")

# One alternation so that matches never overlap: an <img> inside a matched
# <picture> belongs to the picture.
MEDIA_TAG_PATTERN = re.compile(
    r"<img[^>]+>|<svg[^>]*>.*?</svg>|<picture[^>]*>.*?</picture>",
    re.IGNORECASE | re.DOTALL,
)

ALT_ATTRIBUTE_PATTERN = re.compile(r"\balt=[\"'].*?[\"']", re.IGNORECASE)
ALT_VALUE_PATTERN = re.compile(r"alt=[\"'](.*?)[\"']", re.IGNORECASE)
SVG_LABEL_PATTERN = re.compile(r"aria-label=[\"'].*?[\"']|role=[\"']img[\"']", re.IGNORECASE)
PICTURE_IMG_ALT_PATTERN = re.compile(r"<img[^>]+alt=[\"'].*?[\"']", re.IGNORECASE)


def media_kind(tag_html: str) -> Optional[MediaKind]:
    """Returns the kind of media element by its outer tag name."""
    lowered = tag_html.lower()
    for kind in (MediaKind.IMG, MediaKind.SVG, MediaKind.PICTURE):
        if lowered.startswith(f"<{kind.value}"):
            return kind
    return None


def extract_media_elements(html_content: str) -> List[MediaElement]:
    """
    Finds every <img>, <svg> and <picture> element in document order.
    Unterminated elements do not match and are left out.
    """
    elements: List[MediaElement] = []
    for match in MEDIA_TAG_PATTERN.finditer(html_content or ""):
        kind = media_kind(match.group(0))
        if kind is None:
            continue
        elements.append(MediaElement(kind=kind, html=match.group(0), position=match.start()))
    return elements


def classify_media_element(element: MediaElement) -> Optional[DefectCategory]:
    """
    Maps a media element to at most one defect category.

    - img: no alt attribute is MISSING_ALT; an alt that is blank after trimming is EMPTY_ALT.
    - svg: neither aria-label nor role="img" is ARIA_ISSUE.
    - picture: no nested img with an alt attribute is MISSING_ALT. Only presence
      is checked here, so a nested alt="" passes.
    """
    html = element.html

    if element.kind == MediaKind.IMG:
        if not ALT_ATTRIBUTE_PATTERN.search(html):
            return DefectCategory.MISSING_ALT
        alt_match = ALT_VALUE_PATTERN.search(html)
        alt_text = alt_match.group(1) if alt_match else ""
        if not alt_text.strip():
            return DefectCategory.EMPTY_ALT
        return None

    if element.kind == MediaKind.SVG:
        if not SVG_LABEL_PATTERN.search(html):
            return DefectCategory.ARIA_ISSUE
        return None

    if element.kind == MediaKind.PICTURE:
        if not PICTURE_IMG_ALT_PATTERN.search(html):
            return DefectCategory.MISSING_ALT
        return None

    return None


def scan(html_content: str) -> ScanReport:
    """
    Scans a post body for media elements with alt text or ARIA defects.

    Args:
        html_content (str): Raw post markup. Malformed markup is tolerated.

    Returns:
        ScanReport: Defective elements grouped by category, in document order.
    """
    report = ScanReport()
    elements = extract_media_elements(html_content)

    for element in elements:
        category = classify_media_element(element)
        if category is not None:
            logger.debug(f"Flagged {element.kind.value} at offset {element.position} as {category.value}: {element.html}")
            report.add(category, element)

    logger.info(f"Scanned {len(elements)} media elements. Defects: {report.counts()}")
    return report
