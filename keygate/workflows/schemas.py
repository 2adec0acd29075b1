from typing import Dict, List, Optional

from sqlmodel import Field, SQLModel


class WorkflowCreate(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    nodes: List[Dict] = []
    edges: List[Dict] = []


class WorkflowExecutionCreate(SQLModel):
    status: str = "pending"
    input: Optional[Dict] = None
