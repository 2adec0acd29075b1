import uuid
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from keygate.base import CRUDBase
from keygate.integrations.models import Integration
from keygate.integrations.schemas import (
    AI_GATEWAY_INTEGRATION_TYPE,
    ManagedIntegration,
    to_record,
)


class PersistenceError(Exception):
    """The store did not durably record a row it was asked to insert."""


class IntegrationCreate(SQLModel):
    user_id: uuid.UUID
    name: str
    type: str
    config: str
    is_managed: bool = False


class CRUDIntegration(CRUDBase[Integration, IntegrationCreate]):
    """
    Integrations are immutable once written: a changed credential is a
    delete followed by a fresh insert, so no update method is offered.
    """

    def create_managed(
        self, session: Session, *, user_id: uuid.UUID, name: str, config: str
    ) -> uuid.UUID:
        """
        Always inserts a new row; one user may hold one managed key per team.

        Raises PersistenceError when the insert is not committed or the
        refreshed row comes back without an id.
        """
        try:
            db_obj = self.create(
                session,
                obj_in=IntegrationCreate(
                    user_id=user_id,
                    name=name,
                    type=AI_GATEWAY_INTEGRATION_TYPE,
                    config=config,
                    is_managed=True,
                ),
            )
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError("Failed to create integration") from e
        if db_obj.id is None:
            raise PersistenceError("Failed to create integration")
        return db_obj.id

    def get_managed(
        self, session: Session, *, id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[ManagedIntegration]:
        statement = select(Integration).where(
            Integration.id == id,
            Integration.user_id == user_id,
            Integration.type == AI_GATEWAY_INTEGRATION_TYPE,
            Integration.is_managed == True,  # noqa: E712
        )
        row = session.exec(statement).first()
        if row is None:
            return None
        return to_record(row)

    def get_multi_managed_by_owner(
        self, session: Session, *, user_id: uuid.UUID
    ) -> list[ManagedIntegration]:
        statement = (
            select(Integration)
            .where(
                Integration.user_id == user_id,
                Integration.type == AI_GATEWAY_INTEGRATION_TYPE,
                Integration.is_managed == True,  # noqa: E712
            )
            .order_by(Integration.created_at)
        )
        return [to_record(row) for row in session.exec(statement).all()]

    def reassign_owner(
        self, session: Session, *, from_user_id: uuid.UUID, to_user_id: uuid.UUID
    ) -> int:
        """Rewrite the owner of every integration. Does not commit."""
        statement = (
            update(Integration)
            .where(Integration.user_id == from_user_id)
            .values(user_id=to_user_id)
        )
        return session.exec(statement).rowcount


integration = CRUDIntegration(Integration)
