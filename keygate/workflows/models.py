import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from keygate.auth.models import User


class Workflow(SQLModel, table=True):
    """Workflow database model"""
    __tablename__ = "workflow"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True)
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    nodes: List[Dict] = Field(default_factory=list, sa_type=JSON)
    edges: List[Dict] = Field(default_factory=list, sa_type=JSON)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    owner: "User" = Relationship(back_populates="workflows")
    executions: List["WorkflowExecution"] = Relationship(back_populates="workflow", cascade_delete=True)


class WorkflowExecution(SQLModel, table=True):
    """Workflow execution history"""
    __tablename__ = "workflow_execution"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    workflow_id: uuid.UUID = Field(foreign_key="workflow.id", nullable=False, ondelete="CASCADE")
    user_id: uuid.UUID = Field(foreign_key="user.id", nullable=False, ondelete="CASCADE", index=True)
    status: str = Field(default="pending")  # pending, running, success, error, cancelled
    input: Optional[Dict] = Field(default=None, sa_type=JSON)
    output: Optional[Dict] = Field(default=None, sa_type=JSON)
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    workflow: Workflow = Relationship(back_populates="executions")
