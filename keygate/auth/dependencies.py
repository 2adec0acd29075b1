"""
Request-level access to the database session and the caller's identity.

Session issuance and OAuth live in the external auth provider; this module
only resolves an already-issued session token from the request headers.
"""
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlmodel import Session, select

from keygate.auth.models import AuthSession
from keygate.database import get_db

SESSION_COOKIE_NAME = "keygate.session_token"

SessionDep = Annotated[Session, Depends(get_db)]


def _extract_token(headers: Mapping[str, str], cookies: Mapping[str, str]) -> Optional[str]:
    authorization = headers.get("authorization")
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return cookies.get(SESSION_COOKIE_NAME) or None


def resolve_session(
    session: Session, headers: Mapping[str, str], cookies: Optional[Mapping[str, str]] = None
) -> Optional[AuthSession]:
    token = _extract_token(headers, cookies or {})
    if not token:
        return None

    statement = select(AuthSession).where(AuthSession.token == token)
    auth_session = session.exec(statement).first()
    if auth_session is None or auth_session.expires_at <= datetime.utcnow():
        return None
    return auth_session


def get_optional_user_id(request: Request, session: SessionDep) -> Optional[uuid.UUID]:
    """
    The authenticated user's id, or None.

    Routes that must check a feature flag before authentication take this
    instead of failing early with 401.
    """
    auth_session = resolve_session(session, request.headers, request.cookies)
    return auth_session.user_id if auth_session else None


OptionalUserId = Annotated[Optional[uuid.UUID], Depends(get_optional_user_id)]
