"""
Anonymous-to-real account linking.

When the auth provider links an anonymous session to a real identity it
calls `on_link_account`, which moves ownership of everything the anonymous
user created (workflows, workflow executions, integrations) to the new user.

The three reassignments run in a single transaction: either every table is
migrated or none is. Re-running for the same pair only touches rows still
owned by the anonymous id, so a retry after a failure converges.
"""
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from keygate.integrations import crud_integration
from keygate.workflows import crud_workflow

logger = logging.getLogger(__name__)


class IdentityMigrationError(Exception):
    def __init__(self, from_user_id: uuid.UUID, to_user_id: uuid.UUID):
        self.from_user_id = from_user_id
        self.to_user_id = to_user_id
        super().__init__(f"Failed to migrate data from user {from_user_id} to {to_user_id}")


@dataclass(frozen=True)
class MigrationReport:
    workflows: int
    workflow_executions: int
    integrations: int

    @property
    def total(self) -> int:
        return self.workflows + self.workflow_executions + self.integrations


def migrate_anonymous_user_data(
    session: Session, *, from_user_id: uuid.UUID, to_user_id: uuid.UUID
) -> MigrationReport:
    logger.info(f"[migration] Migrating from user {from_user_id} to {to_user_id}")

    try:
        workflows = crud_workflow.workflow.reassign_owner(
            session, from_user_id=from_user_id, to_user_id=to_user_id
        )
        executions = crud_workflow.workflow_execution.reassign_owner(
            session, from_user_id=from_user_id, to_user_id=to_user_id
        )
        integrations = crud_integration.integration.reassign_owner(
            session, from_user_id=from_user_id, to_user_id=to_user_id
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[migration] Error migrating user data: {e}")
        raise IdentityMigrationError(from_user_id, to_user_id) from e

    report = MigrationReport(
        workflows=workflows, workflow_executions=executions, integrations=integrations
    )
    logger.info(
        f"[migration] Successfully migrated data from {from_user_id} to {to_user_id} "
        f"(workflows={report.workflows}, executions={report.workflow_executions}, "
        f"integrations={report.integrations})"
    )
    return report


def on_link_account(
    session: Session, *, anonymous_user_id: uuid.UUID, new_user_id: uuid.UUID
) -> MigrationReport:
    """Account-linking callback for the auth provider. Raises on failure."""
    return migrate_anonymous_user_data(
        session, from_user_id=anonymous_user_id, to_user_id=new_user_id
    )
