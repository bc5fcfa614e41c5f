# alt_text_bot/database/connection.py

import logging
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, OperationFailure

from ..config import settings

logger = logging.getLogger("alt_text_bot.database.connection")

client: Optional[AsyncIOMotorClient] = None
database: Optional[AsyncIOMotorDatabase] = None


async def connect_to_mongo():
    """
    Establishes the MongoDB connection and ensures the indexes the bot queries on.
    """
    global client, database

    try:
        logger.info(f"Attempting to connect to MongoDB at: {settings.MONGODB_URI} for database: {settings.MONGODB_DB_NAME}")
        client = AsyncIOMotorClient(settings.MONGODB_URI)
        database = client[settings.MONGODB_DB_NAME]

        await client.admin.command('ping')
        logger.info("MongoDB connection established successfully.")

        try:
            await database[settings.COMMENTS_COLLECTION].create_index([("post_id", 1), ("author_email", 1)])
            await database[settings.USERS_COLLECTION].create_index("login", unique=True)
            await database[settings.USERMETA_COLLECTION].create_index([("user_id", 1), ("meta_key", 1)], unique=True)
            logger.info("MongoDB indexes for comments, users and usermeta ensured.")
        except OperationFailure as e:
            logger.warning(f"MongoDB index creation warning: {e}. If indexes already exist, this is fine.")

    except ConnectionFailure as e:
        logger.critical(f"CRITICAL: Could not connect to MongoDB at {settings.MONGODB_URI}. "
                        f"Please ensure MongoDB is running and accessible. Error: {e}")
        client = None
        database = None
        raise

    except Exception as e:
        logger.critical(f"An unexpected and critical error occurred during MongoDB connection setup: {e}")
        client = None
        database = None
        raise


async def close_mongo_connection():
    """
    Closes the MongoDB connection.
    """
    global client, database
    if client:
        client.close()
        logger.info("MongoDB connection closed.")
        client = None
        database = None


def get_database() -> AsyncIOMotorDatabase:
    """
    Returns the connected database.
    Raises RuntimeError if connect_to_mongo() has not run successfully.
    """
    if database is None:
        error_msg = "MongoDB database is not initialized. Ensure connect_to_mongo() was called successfully."
        logger.error(error_msg)
        raise RuntimeError(error_msg)
    return database
