"""
Integration database model.

`config` only ever holds ciphertext produced by the secure config codec.
"""
import uuid
from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Field, SQLModel


class Integration(SQLModel, table=True):
    __tablename__ = "integrations"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True)
    name: str = Field(max_length=255)
    type: str = Field(max_length=100, index=True)  # e.g. 'ai-gateway', 'slack'
    config: str = Field(sa_type=Text)
    is_managed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
