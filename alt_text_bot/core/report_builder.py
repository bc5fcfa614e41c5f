# alt_text_bot/core/report_builder.py

import html
import logging
import random
from typing import List, Optional

from ..rules.messages import DEFECT_MESSAGES, MessageCategory, random_message
from ..schemas import DEFECT_ORDER, RenderedFeedback, ScanReport

logger = logging.getLogger("alt_text_bot.core.report_builder")

_default_rng = random.Random()


def render(
    author_name: str,
    intro_sent: bool,
    report: ScanReport,
    rng: Optional[random.Random] = None,
) -> RenderedFeedback:
    """
    Renders the feedback comment for a scan report.

    The comment is an intro paragraph (empty once the author has been greeted),
    one list item per defect category present, and a closing paragraph.

    Args:
        author_name (str): Display name of the post author.
        intro_sent (bool): Whether this author already received the intro sentence.
        report (ScanReport): Result of scanning the post body.
        rng (Optional[random.Random]): Source of randomness for phrasing selection.

    Returns:
        RenderedFeedback: The comment HTML and whether it greeted the author.
    """
    rng = rng or _default_rng

    if intro_sent:
        intro_message = ""
    else:
        intro_message = random_message(MessageCategory.INTRO, rng, author_name=html.escape(author_name, quote=False))

    items: List[str] = []
    for category in DEFECT_ORDER:
        if report.elements_for(category):
            items.append(f"<li>{random_message(DEFECT_MESSAGES[category], rng)}</li>")

    closing_message = random_message(MessageCategory.CLOSING, rng)

    content = f"<p>{intro_message}</p><ul>{''.join(items)}</ul><p>{closing_message}</p>"
    logger.debug(f"Rendered feedback with {len(items)} category messages (intro: {not intro_sent}).")
    return RenderedFeedback(content=content, intro_just_sent=not intro_sent)
