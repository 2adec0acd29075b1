import uuid
from typing import Optional

from sqlmodel import Session, select

from keygate.auth.models import VERCEL_PROVIDER_ID, Account, User
from keygate.auth.schemas import AccountCreate, UserCreate
from keygate.base import CRUDBase


class CRUDUser(CRUDBase[User, UserCreate]):
    pass


class CRUDAccount(CRUDBase[Account, AccountCreate]):
    def get_by_user_and_provider(
        self,
        session: Session,
        *,
        user_id: uuid.UUID,
        provider_id: str = VERCEL_PROVIDER_ID,
    ) -> Optional[Account]:
        statement = select(Account).where(
            Account.user_id == user_id, Account.provider_id == provider_id
        )
        return session.exec(statement).first()


user = CRUDUser(User)
account = CRUDAccount(Account)
