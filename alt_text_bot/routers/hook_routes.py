# alt_text_bot/routers/hook_routes.py

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError
from pymongo.errors import PyMongoError
import logging

from ..config import settings
from ..core.analyzer import BotIdentityError, run_alt_text_check
from ..database.repository import ContentStore, MongoContentStore
from ..schemas import BotIdentity, CheckOutcome, PublishEvent

logger = logging.getLogger("alt_text_bot.routers.hook_routes")

router = APIRouter()


def get_content_store() -> ContentStore:
    """
    Dependency providing the content store. Created per request so it binds to
    the database connected in the application's startup event.
    """
    return MongoContentStore()


def get_bot_identity() -> BotIdentity:
    return settings.bot_identity()


@router.post("/hooks/post-published", response_model=CheckOutcome, summary="Check a newly published post")
async def post_published(
    event: PublishEvent = Body(...),
    store: ContentStore = Depends(get_content_store),
    identity: BotIdentity = Depends(get_bot_identity),
):
    """
    Called by the CMS whenever a post transitions to published. Scans the post
    and creates, updates or removes the bot's feedback comment.
    """
    logger.info(f"API Request: POST /hooks/post-published | Post: {event.post_id}")

    try:
        return await run_alt_text_check(
            event.post_id,
            store,
            identity,
            intro_meta_key=settings.INTRO_META_KEY,
        )
    except BotIdentityError as e:
        logger.critical(f"CRITICAL: Bot identity unavailable while checking post {event.post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Bot account unavailable: {e}"
        )
    except ValidationError as e:
        logger.error(f"Malformed content store record while checking post {event.post_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Malformed content store record: {e.errors()}"
        )
    except PyMongoError as e:
        logger.error(f"Content store error while checking post {event.post_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Content store error. The next publish event will retry."
        )
