from __future__ import annotations
from datetime import datetime, UTC

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlmodel import Field, SQLModel


class StoredEntry(SQLModel, table=True):
    """One key/value pair of the local persistent store."""

    __tablename__ = "local_storage"

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


# ---------- wire models ----------
class Note(BaseModel):
    id: int
    title: str
    content: str = ""
    created_at: datetime
    updated_at: datetime


class LoginResponse(BaseModel):
    message: str = ""
    token: str
    username: str


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    user_id: int = PydanticField(alias="userId")
