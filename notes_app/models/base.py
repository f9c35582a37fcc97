"""Shared base fields for all models."""

import secrets
from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

# Public identifiers are 24 lowercase hex characters
OBJECT_ID_PATTERN = r"^[0-9a-fA-F]{24}$"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_object_id() -> str:
    return secrets.token_hex(12)


class TimestampMixin(SQLModel):
    """Created / updated timestamps injected into every table."""

    created_at: datetime = Field(
        default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=utcnow, nullable=False, sa_type=DateTime(timezone=True),
    )


# ── API schema bases ─────────────────────────────────────────

class ApiModel(BaseModel):
    """Response schema: camelCase on the wire, built from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(ApiModel):
    """Request schema: unknown fields are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


DataT = TypeVar("DataT")


class MessageResponse(ApiModel):
    success: bool = True
    message: str


class DataResponse(ApiModel, Generic[DataT]):
    success: bool = True
    data: DataT


class MessageDataResponse(DataResponse[DataT], Generic[DataT]):
    message: str
