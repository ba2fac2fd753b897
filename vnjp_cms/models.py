"""Document models.

Each model validates one MongoDB document shape at write time: required
fields, enums and type coercion (form fields arrive as strings). Nothing is
checked across documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from vnjp_cms.util.time import parse_day, utcnow


class Document(BaseModel):
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True, populate_by_name=True)

    def to_doc(self) -> Dict[str, Any]:
        """Dict ready for insert/replace (no `_id`)."""
        return self.model_dump(exclude_none=False)


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and v.strip() == "":
        return None
    return v


class ItemRef(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: ObjectId

    @field_validator("id", mode="before")
    @classmethod
    def _oid(cls, v: Any) -> ObjectId:
        return v if isinstance(v, ObjectId) else ObjectId(str(v))


class Timestamps(Document):
    createdAt: datetime = Field(default_factory=utcnow)
    updatedAt: Optional[datetime] = None


# -----------------------------
# Users and one-time strings
# -----------------------------


class User(Timestamps):
    name: str
    email: EmailStr
    password: str
    verified: bool = False
    phone: Optional[str] = None
    birthday: Optional[datetime] = None
    gender: Optional[Literal["male", "female"]] = None
    avatar: Optional[str] = None
    role: List[Literal["user", "admin"]] = Field(default_factory=lambda: ["user"])

    @field_validator("email", mode="before")
    @classmethod
    def _lower(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("role", mode="before")
    @classmethod
    def _role_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("phone", "gender", "avatar", "birthday", mode="before")
    @classmethod
    def _blank(cls, v: Any) -> Any:
        return _blank_to_none(v)


class OneTimeString(Document):
    userId: str
    createdAt: datetime
    expiresAt: datetime


class UserVerification(OneTimeString):
    uniqueString: str
    urlRedirect: str


class UserLogin(OneTimeString):
    loginString: str


class PasswordReset(OneTimeString):
    resetString: str


# -----------------------------
# News
# -----------------------------


class NewsLang(BaseModel):
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    title: str
    poster: str
    description: Optional[str] = None
    news: List[ItemRef] = Field(default_factory=list)


class News(Timestamps):
    visible: bool = False
    day: datetime
    vi: NewsLang
    jp: NewsLang

    @field_validator("day", mode="before")
    @classmethod
    def _day(cls, v: Any) -> datetime:
        return parse_day(v)


class ImageUrl(BaseModel):
    url: str


class TableRow(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None


class Link(BaseModel):
    content: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None


class NewsItem(Document):
    imageCenter: Optional[str] = None
    imageLeft: Optional[str] = None
    imageRight: Optional[str] = None
    imageGroup: List[ImageUrl] = Field(default_factory=list)
    contentCenter: Optional[str] = None
    content: Optional[str] = None
    youtube: Optional[str] = None
    video: Optional[str] = None
    pdf: Optional[str] = None
    table: List[TableRow] = Field(default_factory=list)
    linkGroup: List[Link] = Field(default_factory=list)

    @field_validator("table", "linkGroup", "imageGroup", mode="before")
    @classmethod
    def _list(cls, v: Any) -> Any:
        return _as_list(v)


def _as_list(v: Any) -> Any:
    if v is None or v == "":
        return []
    if isinstance(v, dict):
        return [v]
    return v


# -----------------------------
# Agriculture
# -----------------------------


class AgricultureLang(BaseModel):
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    poster: str
    tag: List[str] = Field(default_factory=list)
    author: str
    title: str
    description: str
    agriculture: List[ItemRef] = Field(default_factory=list)

    @field_validator("tag", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v] if v else []
        return _as_list(v)


class Agriculture(Timestamps):
    visible: bool = False
    day: datetime
    vi: AgricultureLang
    jp: AgricultureLang

    @field_validator("day", mode="before")
    @classmethod
    def _day(cls, v: Any) -> datetime:
        return parse_day(v)


class AgricultureItem(Document):
    title: Optional[str] = None
    topContent: Optional[str] = None
    italicContent: Optional[str] = None
    image: Optional[str] = None
    video: Optional[str] = None
    pdf: Optional[str] = None
    youtube: Optional[str] = None
    bottomContent: Optional[str] = None
    linkGroup: List[Link] = Field(default_factory=list)

    @field_validator("linkGroup", mode="before")
    @classmethod
    def _list(cls, v: Any) -> Any:
        return _as_list(v)


class Tag(Timestamps):
    visible: bool = False
    vi: str
    jp: str


class Year(Document):
    year: int
    isActive: bool = False
    totalNews: int = 0


# -----------------------------
# Company pages
# -----------------------------


class PersonnelLang(BaseModel):
    department: str
    title: str
    content: str
    possition: str
    name: str


class Personnel(Timestamps):
    visible: bool = False
    avatar: str
    vi: PersonnelLang
    jp: PersonnelLang


class Partner(Timestamps):
    image: str
    visible: bool = False


class Cooperative(Timestamps):
    image: str
    visible: bool = False


class FeedbackLang(BaseModel):
    name: str
    content: str


class Feedback(Timestamps):
    avatar: str
    visible: bool = False
    vi: FeedbackLang
    jp: FeedbackLang


class ContactLang(BaseModel):
    address: str
    phone: str
    email: str


class Contact(Timestamps):
    default: bool = False
    vi: ContactLang
    jp: ContactLang
