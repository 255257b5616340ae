"""Validated payloads accepted from callers and the JSON shapes returned to them."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .categories import Category, normalize_category
from .errors import InvalidInput


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ArticleCreate(_CamelModel):
    title: str = Field(min_length=1, max_length=512)
    content: str = ""
    category: Category = Category.OTHERS
    stock_symbol: str | None = None
    stock_price: str | None = None
    price_change: str | None = None
    exchange: str | None = None
    price_target: str | None = None
    time_ago: str = "Just now"
    # Explicit premium override; otherwise derived from the category.
    is_premium: bool | None = None
    source: str | None = None
    sentiment: str | None = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Category:
        if isinstance(value, Category) and value is not Category.TRENDING:
            return value
        return normalize_category(str(value) if value is not None else "")


class UserArticlePayload(_CamelModel):
    user_id: int = Field(gt=0)
    article_id: int = Field(gt=0)


class ArticleViewCreate(_CamelModel):
    article_id: int = Field(gt=0)
    session_id: str = Field(min_length=1, max_length=100)
    time_spent: int = Field(ge=0)


class ArticleOut(_CamelModel):
    id: int
    title: str
    content: str
    title_hi: str | None = None
    content_hi: str | None = None
    category: str
    stock_symbol: str | None = None
    stock_price: str | None = None
    price_change: str | None = None
    exchange: str | None = None
    price_target: str | None = None
    image_url: str
    time_ago: str
    is_premium: bool
    view_count: int
    created_at: datetime
    source: str | None = None
    sentiment: str | None = None


class UserArticleOut(_CamelModel):
    id: int
    user_id: int
    article_id: int
    created_at: datetime


class ArticleViewOut(_CamelModel):
    id: int
    article_id: int
    session_id: str
    time_spent: int
    created_at: datetime


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: type[ModelT], data: Mapping[str, Any] | BaseModel | None) -> ModelT:
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    if data is not None and not isinstance(data, Mapping):
        raise InvalidInput(f"Invalid {model.__name__} payload", ["payload"])
    try:
        return model.model_validate(dict(data or {}))
    except ValidationError as exc:
        fields = []
        for error in exc.errors():
            name = ".".join(str(part) for part in error.get("loc", ())) or "payload"
            if name not in fields:
                fields.append(name)
        raise InvalidInput(f"Invalid {model.__name__} payload", fields) from exc


def dump_json(model: type[BaseModel], obj: Any) -> dict[str, Any]:
    return model.model_validate(obj).model_dump(mode="json", by_alias=True)


__all__ = [
    "ArticleCreate",
    "UserArticlePayload",
    "ArticleViewCreate",
    "ArticleOut",
    "UserArticleOut",
    "ArticleViewOut",
    "validate_payload",
    "dump_json",
]
