# alt_text_bot/database/repository.py

import hashlib
import logging
import secrets
from typing import Any, List, Optional, Protocol
import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config import settings
from ..schemas import FeedbackRecord, NewFeedbackRecord, Post, User
from .connection import get_database

logger = logging.getLogger("alt_text_bot.database.repository")

PASSWORD_HASH_ITERATIONS = 260_000


class ContentStore(Protocol):
    """The content-store operations the alt text check relies on."""

    async def get_post(self, post_id: str) -> Optional[Post]: ...

    async def find_comments(self, post_id: str, author_email: str) -> List[FeedbackRecord]: ...

    async def insert_comment(self, fields: NewFeedbackRecord) -> FeedbackRecord: ...

    async def update_comment(self, comment_id: Any, content: str) -> None: ...

    async def delete_comment(self, comment_id: Any, force: bool = True) -> None: ...

    async def find_user_by_login(self, login: str) -> Optional[User]: ...

    async def create_user(self, login: str, password: str, email: str, role: str, display_name: str) -> str: ...

    async def get_user_by_id(self, user_id: str) -> Optional[User]: ...

    async def get_user_meta(self, user_id: str, key: str) -> Any: ...

    async def set_user_meta(self, user_id: str, key: str, value: Any) -> None: ...


def generate_password(length: int = 24) -> str:
    return secrets.token_urlsafe(length)


def hash_password(password: str) -> str:
    """Salted PBKDF2-SHA256 hash in the form `pbkdf2_sha256$<iterations>$<salt>$<hash>`."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PASSWORD_HASH_ITERATIONS)
    return f"pbkdf2_sha256${PASSWORD_HASH_ITERATIONS}${salt}${digest.hex()}"


def _id_filter(record_id: str) -> Any:
    """Matches a CMS id stored either as a string or as an integer."""
    if record_id.isdigit():
        return {"$in": [record_id, int(record_id)]}
    return record_id


def _to_object_id(comment_id: Any) -> ObjectId:
    try:
        return comment_id if isinstance(comment_id, ObjectId) else ObjectId(str(comment_id))
    except InvalidId as e:
        logger.warning(f"Invalid comment ID format provided: '{comment_id}'. Error: {e}")
        raise ValueError(f"Invalid comment ID format: {comment_id}") from e


class MongoContentStore:
    """
    ContentStore backed by MongoDB collections for posts, comments, users and user meta.
    """
    def __init__(self, database: Optional[AsyncIOMotorDatabase] = None):
        self.db = database if database is not None else get_database()
        self.posts = self.db[settings.POSTS_COLLECTION]
        self.comments = self.db[settings.COMMENTS_COLLECTION]
        self.users = self.db[settings.USERS_COLLECTION]
        self.usermeta = self.db[settings.USERMETA_COLLECTION]

    # --- Posts ---
    async def get_post(self, post_id: str) -> Optional[Post]:
        try:
            doc = await self.posts.find_one({"_id": _id_filter(str(post_id))})
        except PyMongoError as e:
            logger.error(f"MongoDB Error fetching post {post_id}. Error: {e}", exc_info=True)
            raise

        if not doc:
            logger.info(f"Post {post_id} not found.")
            return None
        return Post.model_validate(doc)

    # --- Comments ---
    async def find_comments(self, post_id: str, author_email: str) -> List[FeedbackRecord]:
        """
        Fetches every non-trashed comment on a post written under `author_email`.
        Malformed documents are logged and skipped.
        """
        records: List[FeedbackRecord] = []
        try:
            cursor = self.comments.find({
                "post_id": post_id,
                "author_email": author_email,
                "trashed": {"$ne": True},
            }).sort("created_at", 1)
            docs_list = await cursor.to_list(None)
        except PyMongoError as e:
            logger.error(f"MongoDB Fetch Error: Failed to retrieve comments for post {post_id}. Error: {e}", exc_info=True)
            raise

        for doc in docs_list:
            try:
                records.append(FeedbackRecord.model_validate(doc))
            except ValidationError as e:
                logger.error(f"Comment Parsing Error: Could not parse comment {doc.get('_id', 'N/A')} on post {post_id}. Error: {e}")
                continue

        logger.info(f"Found {len(records)} comment(s) by {author_email} on post {post_id}.")
        return records

    async def insert_comment(self, fields: NewFeedbackRecord) -> FeedbackRecord:
        doc = fields.model_dump()
        doc["created_at"] = datetime.datetime.now(datetime.timezone.utc)
        try:
            result = await self.comments.insert_one(doc)
        except PyMongoError as e:
            logger.error(f"MongoDB Save Error: Failed to insert comment on post {fields.post_id}. Error: {e}", exc_info=True)
            raise

        logger.info(f"MongoDB Save: Comment {result.inserted_id} inserted on post {fields.post_id}.")
        return FeedbackRecord.model_validate({**doc, "_id": result.inserted_id})

    async def update_comment(self, comment_id: Any, content: str) -> None:
        obj_id = _to_object_id(comment_id)
        try:
            await self.comments.update_one({"_id": obj_id}, {"$set": {"content": content}})
        except PyMongoError as e:
            logger.error(f"MongoDB Save Error: Failed to update comment {comment_id}. Error: {e}", exc_info=True)
            raise
        logger.info(f"MongoDB Save: Comment {comment_id} updated.")

    async def delete_comment(self, comment_id: Any, force: bool = True) -> None:
        """
        Removes a comment. With `force` the document is deleted outright,
        otherwise it is only marked as trashed.
        """
        obj_id = _to_object_id(comment_id)
        try:
            if force:
                await self.comments.delete_one({"_id": obj_id})
            else:
                await self.comments.update_one({"_id": obj_id}, {"$set": {"trashed": True}})
        except PyMongoError as e:
            logger.error(f"MongoDB Delete Error: Failed to delete comment {comment_id}. Error: {e}", exc_info=True)
            raise
        logger.info(f"MongoDB Delete: Comment {comment_id} {'deleted' if force else 'trashed'}.")

    # --- Users ---
    async def find_user_by_login(self, login: str) -> Optional[User]:
        try:
            doc = await self.users.find_one({"login": login})
        except PyMongoError as e:
            logger.error(f"MongoDB Error looking up user '{login}'. Error: {e}", exc_info=True)
            raise
        return User.model_validate(doc) if doc else None

    async def create_user(self, login: str, password: str, email: str, role: str, display_name: str) -> str:
        """
        Creates a user and returns its id. If a concurrent request created the
        same login first, that user's id is returned instead.
        """
        user_id = str(ObjectId())
        doc = {
            "_id": user_id,
            "login": login,
            "email": email,
            "role": role,
            "display_name": display_name,
            "password_hash": hash_password(password),
            "registered_at": datetime.datetime.now(datetime.timezone.utc),
        }
        try:
            await self.users.insert_one(doc)
        except DuplicateKeyError:
            logger.warning(f"User '{login}' was created concurrently; reusing the existing account.")
            existing = await self.find_user_by_login(login)
            if existing is None:
                raise
            return existing.id
        except PyMongoError as e:
            logger.error(f"MongoDB Save Error: Failed to create user '{login}'. Error: {e}", exc_info=True)
            raise

        logger.info(f"MongoDB Save: User '{login}' created with ID: {user_id}")
        return user_id

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        try:
            doc = await self.users.find_one({"_id": _id_filter(str(user_id))})
        except PyMongoError as e:
            logger.error(f"MongoDB Error fetching user {user_id}. Error: {e}", exc_info=True)
            raise
        return User.model_validate(doc) if doc else None

    # --- User Meta ---
    async def get_user_meta(self, user_id: str, key: str) -> Any:
        try:
            doc = await self.usermeta.find_one({"user_id": user_id, "meta_key": key})
        except PyMongoError as e:
            logger.error(f"MongoDB Error reading meta '{key}' for user {user_id}. Error: {e}", exc_info=True)
            raise
        return doc.get("meta_value") if doc else None

    async def set_user_meta(self, user_id: str, key: str, value: Any) -> None:
        try:
            await self.usermeta.update_one(
                {"user_id": user_id, "meta_key": key},
                {"$set": {"meta_value": value}},
                upsert=True
            )
        except PyMongoError as e:
            logger.error(f"MongoDB Save Error: Failed to write meta '{key}' for user {user_id}. Error: {e}", exc_info=True)
            raise
        logger.info(f"MongoDB Save: Meta '{key}' set for user {user_id}.")
