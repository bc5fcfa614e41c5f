# alt_text_bot/schemas.py

from pydantic import BaseModel, Field, GetCoreSchemaHandler
from typing import List, Dict, Any, Optional, Union, Literal
from enum import Enum
from bson import ObjectId
from pydantic_core import core_schema
from datetime import datetime, timezone


class PyObjectId(ObjectId):
    """
    MongoDB ObjectId usable as a Pydantic v2 field type.
    Accepts ObjectId instances or their string form and always serializes to a string.
    """

    @classmethod
    def validate(cls, v: Any) -> ObjectId:
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str):
            if ObjectId.is_valid(v):
                return ObjectId(v)
            raise ValueError(f"Invalid ObjectId string: '{v}'")
        raise ValueError("Invalid ObjectId type or format")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls.validate,
            core_schema.union_schema([
                core_schema.is_instance_schema(ObjectId),
                core_schema.str_schema()
            ]),
            serialization=core_schema.to_string_ser_schema()
        )

    def __eq__(self, other):
        if isinstance(other, ObjectId):
            return self.binary == other.binary
        return NotImplemented

    def __hash__(self):
        return self.binary.__hash__()


# --- Published status as stored by the CMS ---
PUBLISHED_STATUS = "publish"


# --- Bot Identity ---
class BotIdentity(BaseModel):
    """The fixed account and comment-author fields the bot writes under."""
    login: str = Field(..., example="Equalify")
    display_name: str = Field(..., example="Equalify")
    comment_author: str = Field(..., example="Equalify")
    email: str = Field(..., example="support@equalify.com")
    url: str = Field(..., example="https://equalify.com")
    role: str = Field("author", example="author")

    model_config = {"frozen": True}


# --- Content Store Records ---
class Post(BaseModel):
    """A blog post as exposed by the content store. Read-only to the bot."""
    id: str = Field(..., alias="_id", example="1024")
    status: str = Field(..., example="publish")
    author_id: str = Field(..., example="7")
    content: str = Field("", example="<p>Hello</p><img src='a.jpg'>")
    title: Optional[str] = Field(None, example="My first post")

    # CMS stores commonly use integer ids; they are handled as strings here.
    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}

    @property
    def is_published(self) -> bool:
        return self.status == PUBLISHED_STATUS


class User(BaseModel):
    id: str = Field(..., alias="_id", example="7")
    login: str = Field(..., example="jane")
    email: Optional[str] = Field(None, example="jane@example.com")
    display_name: str = Field(..., example="Jane Doe")
    role: Optional[str] = Field(None, example="author")

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}


class NewFeedbackRecord(BaseModel):
    """Fields of a feedback comment that has not been stored yet."""
    post_id: str = Field(..., example="1024")
    author: str = Field(..., example="Equalify")
    author_email: str = Field(..., example="support@equalify.com")
    author_url: str = Field(..., example="https://equalify.com")
    content: str
    comment_type: str = ""
    parent: int = 0
    user_id: str = Field(..., example="3")
    approved: bool = True

    model_config = {"coerce_numbers_to_str": True}


class FeedbackRecord(NewFeedbackRecord):
    """A stored feedback comment."""
    id: PyObjectId = Field(alias="_id", default_factory=PyObjectId)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {
        "populate_by_name": True,
        "arbitrary_types_allowed": True
    }


# --- Scan Results ---
class DefectCategory(str, Enum):
    MISSING_ALT = "missing_alt"
    EMPTY_ALT = "empty_alt"
    ARIA_ISSUE = "aria_issue"


# Order in which categories are listed in a feedback comment.
DEFECT_ORDER = (DefectCategory.MISSING_ALT, DefectCategory.EMPTY_ALT, DefectCategory.ARIA_ISSUE)


class MediaKind(str, Enum):
    IMG = "img"
    SVG = "svg"
    PICTURE = "picture"


class MediaElement(BaseModel):
    """A media tag matched in a post body."""
    kind: MediaKind
    html: str = Field(..., example="<img src='a.jpg'>")
    position: int = Field(..., ge=0, description="Offset of the match in the scanned body.")


class ScanReport(BaseModel):
    """Defective media elements grouped by category, each in document order."""
    missing_alt: List[MediaElement] = Field(default_factory=list)
    empty_alt: List[MediaElement] = Field(default_factory=list)
    aria_issue: List[MediaElement] = Field(default_factory=list)

    def elements_for(self, category: DefectCategory) -> List[MediaElement]:
        return getattr(self, category.value)

    def add(self, category: DefectCategory, element: MediaElement) -> None:
        self.elements_for(category).append(element)

    @property
    def has_issues(self) -> bool:
        return any(self.elements_for(category) for category in DEFECT_ORDER)

    def counts(self) -> Dict[str, int]:
        return {category.value: len(self.elements_for(category)) for category in DEFECT_ORDER}


class RenderedFeedback(BaseModel):
    content: str
    intro_just_sent: bool


# --- Reconciliation Actions ---
class DeleteAll(BaseModel):
    kind: Literal["delete_all"] = "delete_all"
    records: List[FeedbackRecord] = Field(default_factory=list)


class UpdateEach(BaseModel):
    kind: Literal["update_each"] = "update_each"
    records: List[FeedbackRecord]
    content: str
    mark_intro_sent: bool = False


class Insert(BaseModel):
    kind: Literal["insert"] = "insert"
    record: NewFeedbackRecord
    mark_intro_sent: bool = False


ReconcileAction = Union[DeleteAll, UpdateEach, Insert]


# --- API Schemas ---
class PublishEvent(BaseModel):
    post_id: str = Field(..., example="1024")

    model_config = {"coerce_numbers_to_str": True}


class CheckOutcome(BaseModel):
    """What a publish-event check did to the post's feedback comments."""
    post_id: str = Field(..., example="1024")
    action: Literal["skipped", "deleted", "updated", "inserted"]
    reason: Optional[str] = Field(None, example="post_not_published")
    counts: Dict[str, int] = Field(default_factory=dict, example={"missing_alt": 1, "empty_alt": 0, "aria_issue": 0})
    records_affected: int = 0


class ScanRequest(BaseModel):
    content: str = Field(..., example="<img src='a.jpg'>")


class ScanResponse(BaseModel):
    has_issues: bool
    counts: Dict[str, int]
    report: ScanReport
