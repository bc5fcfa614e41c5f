from typing import Any, Dict, List, Optional, Tuple

import pytest

from alt_text_bot.schemas import BotIdentity, FeedbackRecord, NewFeedbackRecord, Post, User


class FirstChoiceRng:
    """Stands in for random.Random and always picks the first option."""

    def choice(self, options):
        return options[0]


class InMemoryContentStore:
    """ContentStore kept in dictionaries, recording every write."""

    def __init__(self):
        self.posts: Dict[str, Post] = {}
        self.users: Dict[str, User] = {}
        self.comments: Dict[str, FeedbackRecord] = {}
        self.meta: Dict[Tuple[str, str], Any] = {}
        self.deleted: List[Tuple[str, bool]] = []
        self.meta_writes: List[Tuple[str, str, Any]] = []
        self.created_users: List[str] = []

    # helpers for arranging test state
    def add_post(self, post_id, content, status="publish", author_id="7"):
        self.posts[post_id] = Post(id=post_id, status=status, author_id=author_id, content=content)

    def add_user(self, user_id, login, display_name, email=None):
        self.users[user_id] = User(id=user_id, login=login, display_name=display_name, email=email)

    def add_comment(self, post_id, author_email, content="old", author="Equalify") -> FeedbackRecord:
        record = FeedbackRecord(
            post_id=post_id,
            author=author,
            author_email=author_email,
            author_url="https://equalify.com",
            content=content,
            user_id="bot",
        )
        self.comments[str(record.id)] = record
        return record

    def comments_for(self, post_id, author_email="support@equalify.com") -> List[FeedbackRecord]:
        return [c for c in self.comments.values() if c.post_id == post_id and c.author_email == author_email]

    # ContentStore
    async def get_post(self, post_id: str) -> Optional[Post]:
        return self.posts.get(post_id)

    async def find_comments(self, post_id: str, author_email: str) -> List[FeedbackRecord]:
        return self.comments_for(post_id, author_email)

    async def insert_comment(self, fields: NewFeedbackRecord) -> FeedbackRecord:
        record = FeedbackRecord(**fields.model_dump())
        self.comments[str(record.id)] = record
        return record

    async def update_comment(self, comment_id, content: str) -> None:
        record = self.comments[str(comment_id)]
        self.comments[str(comment_id)] = record.model_copy(update={"content": content})

    async def delete_comment(self, comment_id, force: bool = True) -> None:
        self.comments.pop(str(comment_id))
        self.deleted.append((str(comment_id), force))

    async def find_user_by_login(self, login: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.login == login), None)

    async def create_user(self, login, password, email, role, display_name) -> str:
        user_id = f"user-{len(self.users) + 1}"
        self.users[user_id] = User(id=user_id, login=login, email=email, role=role, display_name=display_name)
        self.created_users.append(login)
        return user_id

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def get_user_meta(self, user_id: str, key: str) -> Any:
        return self.meta.get((user_id, key))

    async def set_user_meta(self, user_id: str, key: str, value: Any) -> None:
        self.meta[(user_id, key)] = value
        self.meta_writes.append((user_id, key, value))


@pytest.fixture
def identity():
    return BotIdentity(
        login="Equalify",
        display_name="Equalify",
        comment_author="Equalify",
        email="support@equalify.com",
        url="https://equalify.com",
        role="author",
    )


@pytest.fixture
def store():
    store = InMemoryContentStore()
    store.add_user("7", "jane", "Jane Doe", email="jane@example.com")
    return store


@pytest.fixture
def first_choice():
    return FirstChoiceRng()
