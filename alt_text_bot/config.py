# alt_text_bot/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional
import logging
import os

from .schemas import BotIdentity

logger = logging.getLogger("alt_text_bot.config")

# User meta key remembering that an author already received the intro sentence.
DEFAULT_INTRO_META_KEY = "alt_text_bot_intro_sent"


class Settings(BaseSettings):
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "alt_text_bot"
    POSTS_COLLECTION: str = "posts"
    COMMENTS_COLLECTION: str = "comments"
    USERS_COLLECTION: str = "users"
    USERMETA_COLLECTION: str = "usermeta"

    # Shared secret the CMS sends as "Authorization: Bearer <secret>".
    WEBHOOK_SECRET: Optional[str] = None

    BOT_LOGIN: str = "Equalify"
    BOT_DISPLAY_NAME: str = "Equalify"
    BOT_COMMENT_AUTHOR: str = "Equalify"
    BOT_EMAIL: str = "support@equalify.com"
    BOT_URL: str = "https://equalify.com"
    BOT_ROLE: str = "author"
    INTRO_META_KEY: str = DEFAULT_INTRO_META_KEY

    LOG_LEVEL: str = "INFO"
    BACKEND_CORS_ORIGINS: list[str] = []

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def bot_identity(self) -> BotIdentity:
        """Builds the immutable identity the bot comments under."""
        return BotIdentity(
            login=self.BOT_LOGIN,
            display_name=self.BOT_DISPLAY_NAME,
            comment_author=self.BOT_COMMENT_AUTHOR,
            email=self.BOT_EMAIL,
            url=self.BOT_URL,
            role=self.BOT_ROLE,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Caches the settings object.
    """
    logger.debug(f"Loading settings. Working directory: {os.getcwd()} | .env present: {os.path.exists('.env')}")
    return Settings()

settings = get_settings()
