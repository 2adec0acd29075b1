import uuid

from sqlalchemy import update
from sqlmodel import Session, func, select

from keygate.base import CRUDBase
from keygate.workflows.models import Workflow, WorkflowExecution
from keygate.workflows.schemas import WorkflowCreate, WorkflowExecutionCreate


class CRUDWorkflow(CRUDBase[Workflow, WorkflowCreate]):
    def create_with_owner(
        self, session: Session, *, obj_in: WorkflowCreate, user_id: uuid.UUID
    ) -> Workflow:
        db_obj = Workflow(**obj_in.model_dump(), user_id=user_id)
        session.add(db_obj)
        session.commit()
        session.refresh(db_obj)
        return db_obj

    def count_by_owner(self, session: Session, *, user_id: uuid.UUID) -> int:
        statement = (
            select(func.count()).select_from(Workflow).where(Workflow.user_id == user_id)
        )
        return session.exec(statement).one()

    def reassign_owner(
        self, session: Session, *, from_user_id: uuid.UUID, to_user_id: uuid.UUID
    ) -> int:
        """Rewrite the owner of every workflow. Does not commit."""
        statement = (
            update(Workflow)
            .where(Workflow.user_id == from_user_id)
            .values(user_id=to_user_id)
        )
        return session.exec(statement).rowcount


class CRUDWorkflowExecution(CRUDBase[WorkflowExecution, WorkflowExecutionCreate]):
    def create_for_workflow(
        self, session: Session, *, obj_in: WorkflowExecutionCreate, workflow: Workflow
    ) -> WorkflowExecution:
        db_obj = WorkflowExecution(
            **obj_in.model_dump(), workflow_id=workflow.id, user_id=workflow.user_id
        )
        session.add(db_obj)
        session.commit()
        session.refresh(db_obj)
        return db_obj

    def reassign_owner(
        self, session: Session, *, from_user_id: uuid.UUID, to_user_id: uuid.UUID
    ) -> int:
        """Rewrite the owner of every execution. Does not commit."""
        statement = (
            update(WorkflowExecution)
            .where(WorkflowExecution.user_id == from_user_id)
            .values(user_id=to_user_id)
        )
        return session.exec(statement).rowcount


workflow = CRUDWorkflow(Workflow)
workflow_execution = CRUDWorkflowExecution(WorkflowExecution)
