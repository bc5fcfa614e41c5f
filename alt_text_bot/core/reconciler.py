# alt_text_bot/core/reconciler.py

import logging
import random
from typing import List, Optional, Sequence

from ..schemas import (
    BotIdentity,
    DeleteAll,
    FeedbackRecord,
    Insert,
    NewFeedbackRecord,
    ReconcileAction,
    ScanReport,
    UpdateEach,
)
from .report_builder import render

logger = logging.getLogger("alt_text_bot.core.reconciler")


def bot_records_for_post(
    post_id: str,
    records: Sequence[FeedbackRecord],
    identity: BotIdentity,
) -> List[FeedbackRecord]:
    """Keeps only the records the bot itself wrote on this post."""
    return [r for r in records if r.post_id == post_id and r.author_email == identity.email]


def build_feedback_record(
    post_id: str,
    content: str,
    identity: BotIdentity,
    bot_user_id: str,
) -> NewFeedbackRecord:
    return NewFeedbackRecord(
        post_id=post_id,
        author=identity.comment_author,
        author_email=identity.email,
        author_url=identity.url,
        content=content,
        comment_type="",
        parent=0,
        user_id=bot_user_id,
        approved=True,
    )


def reconcile(
    post_id: str,
    report: ScanReport,
    existing_records: Sequence[FeedbackRecord],
    identity: BotIdentity,
    author_name: str,
    intro_sent: bool,
    bot_user_id: str,
    rng: Optional[random.Random] = None,
) -> ReconcileAction:
    """
    Decides what to do with the bot's feedback comments on a post.

    - No defects: delete every bot comment on the post (possibly none).
    - Defects and existing bot comments: rewrite all of them with the same content,
      which also collapses duplicates left by racing publish events.
    - Defects and no bot comment: insert exactly one.

    The returned update/insert action carries `mark_intro_sent` when the rendered
    comment greeted the author, so the caller persists the flag once either way.
    """
    owned = bot_records_for_post(post_id, existing_records, identity)

    if not report.has_issues:
        logger.info(f"Post {post_id}: no defects, removing {len(owned)} feedback comment(s).")
        return DeleteAll(records=owned)

    rendered = render(author_name, intro_sent, report, rng)

    if owned:
        logger.info(f"Post {post_id}: updating {len(owned)} existing feedback comment(s).")
        return UpdateEach(records=owned, content=rendered.content, mark_intro_sent=rendered.intro_just_sent)

    logger.info(f"Post {post_id}: inserting new feedback comment.")
    return Insert(
        record=build_feedback_record(post_id, rendered.content, identity, bot_user_id),
        mark_intro_sent=rendered.intro_just_sent,
    )
