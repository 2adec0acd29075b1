import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from keygate.workflows.models import Workflow

VERCEL_PROVIDER_ID = "vercel"


class User(SQLModel, table=True):
    """User database model. Anonymous users are later linked to real ones."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: Optional[str] = Field(default=None, unique=True, index=True, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)
    is_anonymous: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    accounts: List["Account"] = Relationship(back_populates="user", cascade_delete=True)
    workflows: List["Workflow"] = Relationship(back_populates="owner")


class Account(SQLModel, table=True):
    """An external identity linked to a user (one per provider)."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True)
    provider_id: str = Field(max_length=100)  # e.g. 'vercel', 'github'
    account_id: str = Field(max_length=255)  # subject id at the provider
    access_token: Optional[str] = None
    scope: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    user: User = Relationship(back_populates="accounts")


class AuthSession(SQLModel, table=True):
    __tablename__ = "auth_session"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    token: str = Field(unique=True, index=True, max_length=255)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE")
    expires_at: datetime
