# alt_text_bot/rules/messages.py

import random
from enum import Enum
from typing import Dict, Sequence, Tuple, TypeVar

from ..schemas import DefectCategory

T = TypeVar("T")


class MessageCategory(str, Enum):
    INTRO = "intro"
    MISSING_ALT = "missing_alt"
    EMPTY_ALT = "empty_alt"
    ARIA_ISSUE = "aria_issue"
    CLOSING = "closing"


# Intro phrasings take the author's display name as {author_name}.
MESSAGE_BANK: Dict[MessageCategory, Tuple[str, ...]] = {
    MessageCategory.INTRO: (
        "Hi {author_name}, here's a friendly note on improving accessibility!",
        "{author_name}, just a quick accessibility tip for you!",
        "Hello {author_name}! Let’s take a moment to check accessibility in your post.",
    ),
    MessageCategory.MISSING_ALT: (
        "Some images are missing alt text. Descriptive alt text helps screen reader users understand your images.",
        "There are images in your post without alt text. Adding alt text makes your content more accessible.",
        "Alt text is missing for some images. Consider adding it to enhance accessibility for all readers.",
    ),
    MessageCategory.EMPTY_ALT: (
        "Some images have empty alt text. If they're decorative, that's fine; otherwise, add a description.",
        "You have images with empty alt text. Ensure they're truly decorative or consider describing them.",
        "Empty alt text is detected in some images. If they aren't decorative, add descriptions for accessibility.",
    ),
    MessageCategory.ARIA_ISSUE: (
        "Some media elements are missing ARIA roles or labels. Adding them improves accessibility.",
        "Ensure media elements like SVGs and images have appropriate ARIA attributes (e.g., aria-label or role='img').",
        "ARIA attributes are missing in some media. Consider adding descriptive labels for better accessibility.",
    ),
    MessageCategory.CLOSING: (
        "Thanks for working on making the web a better place for everyone!",
        "Appreciate your effort to make content accessible for all readers!",
        "Thanks for your dedication to improving web accessibility!",
    ),
}

DEFECT_MESSAGES: Dict[DefectCategory, MessageCategory] = {
    DefectCategory.MISSING_ALT: MessageCategory.MISSING_ALT,
    DefectCategory.EMPTY_ALT: MessageCategory.EMPTY_ALT,
    DefectCategory.ARIA_ISSUE: MessageCategory.ARIA_ISSUE,
}


def pick_uniform(options: Sequence[T], rng: random.Random) -> T:
    """Returns one of `options`, chosen uniformly by `rng`."""
    if not options:
        raise ValueError("Cannot pick from an empty set of options.")
    return rng.choice(options)


def random_message(category: MessageCategory, rng: random.Random, **context: str) -> str:
    """
    Picks a phrasing for `category` and fills in its placeholders.

    Args:
        category (MessageCategory): Which bank to draw from.
        rng (random.Random): Source of randomness; anything with a `choice` method works.
        **context (str): Placeholder values, e.g. `author_name` for intros.

    Returns:
        str: The selected phrasing.
    """
    return pick_uniform(MESSAGE_BANK[category], rng).format(**context)
