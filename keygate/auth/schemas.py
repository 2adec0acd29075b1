import uuid
from typing import Optional

from sqlmodel import Field, SQLModel


class UserCreate(SQLModel):
    email: Optional[str] = Field(default=None, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)
    is_anonymous: bool = False


class AccountCreate(SQLModel):
    user_id: uuid.UUID
    provider_id: str = Field(max_length=100)
    account_id: str = Field(max_length=255)
    access_token: Optional[str] = None
    scope: Optional[str] = None
