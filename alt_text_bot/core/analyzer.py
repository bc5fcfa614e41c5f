# alt_text_bot/core/analyzer.py

import logging
import random
import traceback
from typing import Optional

from ..config import DEFAULT_INTRO_META_KEY
from ..database.repository import ContentStore, generate_password
from ..rules.alt_text import scan
from ..schemas import BotIdentity, CheckOutcome, DeleteAll, Insert, ReconcileAction, UpdateEach
from .reconciler import reconcile

logger = logging.getLogger("alt_text_bot.core.analyzer")

# Used when the post author's account cannot be found.
FALLBACK_AUTHOR_NAME = "Author"


class BotIdentityError(RuntimeError):
    """The bot account could not be found or created."""


async def get_or_create_bot_user(store: ContentStore, identity: BotIdentity) -> str:
    """
    Returns the id of the bot's user account, creating the account on first use.

    Raises:
        BotIdentityError: If the account does not exist and cannot be created.
    """
    user = await store.find_user_by_login(identity.login)
    if user:
        return user.id

    logger.info(f"Bot user '{identity.login}' not found. Creating it.")
    try:
        user_id = await store.create_user(
            login=identity.login,
            password=generate_password(),
            email=identity.email,
            role=identity.role,
            display_name=identity.display_name,
        )
    except Exception as e:
        logger.critical(f"CRITICAL: Could not create bot user '{identity.login}'. Error: {e}")
        logger.error(traceback.format_exc())
        raise BotIdentityError(f"Could not create bot user '{identity.login}': {e}") from e

    if not user_id:
        raise BotIdentityError(f"Content store returned no id for bot user '{identity.login}'.")
    return user_id


async def apply_action(
    store: ContentStore,
    action: ReconcileAction,
    author_id: str,
    intro_meta_key: str = DEFAULT_INTRO_META_KEY,
) -> int:
    """
    Writes a reconciliation decision to the content store.

    Returns:
        int: Number of comment records deleted, updated or inserted.
    """
    if isinstance(action, DeleteAll):
        for record in action.records:
            await store.delete_comment(record.id, force=True)
        return len(action.records)

    if isinstance(action, UpdateEach):
        for record in action.records:
            await store.update_comment(record.id, action.content)
        affected = len(action.records)
    elif isinstance(action, Insert):
        await store.insert_comment(action.record)
        affected = 1
    else:
        raise TypeError(f"Unknown reconcile action: {action!r}")

    if action.mark_intro_sent:
        await store.set_user_meta(author_id, intro_meta_key, True)
        logger.info(f"Marked intro as sent for author {author_id}.")
    return affected


async def run_alt_text_check(
    post_id: str,
    store: ContentStore,
    identity: BotIdentity,
    rng: Optional[random.Random] = None,
    intro_meta_key: str = DEFAULT_INTRO_META_KEY,
) -> CheckOutcome:
    """
    Handles one publish event for a post.
    This includes:
    1. Making sure the bot account exists.
    2. Re-checking that the post exists and is published.
    3. Scanning the post body for media defects.
    4. Reconciling the bot's feedback comment with the scan result.

    Args:
        post_id (str): The post that was published.
        store (ContentStore): Access to posts, comments, users and user meta.
        identity (BotIdentity): Account and comment fields the bot writes under.
        rng (Optional[random.Random]): Source of randomness for message phrasing.
        intro_meta_key (str): User meta key of the intro-sent flag.

    Returns:
        CheckOutcome: What was done to the post's feedback comments.
    """
    bot_user_id = await get_or_create_bot_user(store, identity)

    post = await store.get_post(post_id)
    if post is None:
        logger.info(f"Post {post_id} not found. Nothing to check.")
        return CheckOutcome(post_id=post_id, action="skipped", reason="post_not_found")
    if not post.is_published:
        logger.info(f"Post {post_id} has status '{post.status}', not published. Nothing to check.")
        return CheckOutcome(post_id=post_id, action="skipped", reason="post_not_published")

    report = scan(post.content)
    existing_records = await store.find_comments(post_id, identity.email)

    author_name = FALLBACK_AUTHOR_NAME
    intro_sent = True
    if report.has_issues:
        author = await store.get_user_by_id(post.author_id)
        if author:
            author_name = author.display_name
        intro_sent = bool(await store.get_user_meta(post.author_id, intro_meta_key))

    action = reconcile(
        post_id=post_id,
        report=report,
        existing_records=existing_records,
        identity=identity,
        author_name=author_name,
        intro_sent=intro_sent,
        bot_user_id=bot_user_id,
        rng=rng,
    )
    affected = await apply_action(store, action, post.author_id, intro_meta_key)

    outcome_action = {"delete_all": "deleted", "update_each": "updated", "insert": "inserted"}[action.kind]
    logger.info(f"Alt text check finished for post {post_id}: {outcome_action} {affected} comment(s).")
    return CheckOutcome(
        post_id=post_id,
        action=outcome_action,
        counts=report.counts(),
        records_affected=affected,
    )
