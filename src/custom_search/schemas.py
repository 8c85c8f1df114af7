from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

PUBLISHED_STATUS = "publish"


class SearchRequest(BaseModel):
    term: str = ""
    # Raw marker value: "general", a form id, or None when the marker is absent.
    form_identity: Optional[str] = None
    token: Optional[str] = None
    variant: Literal["customizable", "trend_alert"] = "customizable"
    page: int = 1


class AuthResult(BaseModel):
    valid: bool
    generation: Optional[int] = None
    reason: Literal["ok", "not_requested", "unauthenticated"] = "ok"


class SearchPredicate(BaseModel):
    model_config = ConfigDict(frozen=True)

    term: str
    pattern: str
    post_types: Tuple[str, ...]
    published_only: bool = True

    def matches(self, record) -> bool:
        if record.post_type not in self.post_types:
            return False
        if self.published_only and record.post_status != PUBLISHED_STATUS:
            return False
        needle = self.term.lower()
        return (
            needle in (record.post_title or "").lower()
            or needle in (record.post_content or "").lower()
        )


class EmptyPredicate(BaseModel):
    """Predicate for a blank search term. It never matches anything."""

    model_config = ConfigDict(frozen=True)

    def matches(self, record) -> bool:
        return False


EMPTY = EmptyPredicate()


class SearchResult(BaseModel):
    id: int
    post_type: str
    title: str
    content: str
    status: str
    date: Optional[datetime] = None


class SearchResponse(BaseModel):
    results: List[SearchResult]
    count: int
    filtered: bool
    post_types: List[str] = Field(default_factory=list)
    page: int = 1


class ContentTypeOut(BaseModel):
    name: str
    label: str


class ScopeSettings(BaseModel):
    post_types: List[str] = Field(default_factory=list)


class GlobalSettingsResponse(BaseModel):
    post_types: List[str]
    available_post_types: List[ContentTypeOut]


class SearchFormIn(BaseModel):
    title: str
    post_types: List[str] = Field(default_factory=list)


class SearchFormOut(BaseModel):
    id: int
    title: str
    post_types: List[str]
    shortcode: str
