"""
AI Gateway consent routes.

POST   /ai-gateway/consent                     grant: create a managed key
DELETE /ai-gateway/consent?integrationId=...   revoke one managed key
GET    /ai-gateway/consent                     list the caller's managed keys
"""
import logging
from functools import lru_cache
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Query, Request

from keygate.ai_gateway.schemas import (
    ConsentGranted,
    ConsentRequest,
    ConsentRevoked,
    ConsentStatus,
    ErrorResponse,
    ManagedIntegrationPublic,
)
from keygate.ai_gateway.service import ConsentService
from keygate.auth.dependencies import OptionalUserId, SessionDep

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_consent_service() -> ConsentService:
    # Built once per process; the feature flag is resolved here, not per call
    return ConsentService.from_settings()


ConsentServiceDep = Annotated[ConsentService, Depends(get_consent_service)]

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 404, 500)
}


async def _read_consent_request(request: Request) -> ConsentRequest:
    # A missing or unparseable body means "auto-detect the team"
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    return ConsentRequest.from_payload(payload)


@router.post("/consent", response_model=ConsentGranted, responses=ERROR_RESPONSES)
async def grant_consent(
    request: Request,
    session: SessionDep,
    user_id: OptionalUserId,
    consent: ConsentServiceDep,
) -> Any:
    """Record consent and create an API key on the user's Vercel team."""
    body = await _read_consent_request(request)
    result = await consent.grant(session, user_id=user_id, request=body)
    return ConsentGranted(managed_integration_id=str(result.integration_id))


@router.delete("/consent", response_model=ConsentRevoked, responses=ERROR_RESPONSES)
async def revoke_consent(
    session: SessionDep,
    user_id: OptionalUserId,
    consent: ConsentServiceDep,
    integration_id: Optional[str] = Query(default=None, alias="integrationId"),
) -> Any:
    """
    Revoke consent and delete one managed API key.

    Users may hold one managed key per team, so the integration to revoke
    must be named explicitly.
    """
    await consent.revoke(session, user_id=user_id, integration_id=integration_id)
    return ConsentRevoked()


@router.get("/consent", response_model=ConsentStatus, responses=ERROR_RESPONSES)
def consent_status(
    session: SessionDep,
    user_id: OptionalUserId,
    consent: ConsentServiceDep,
) -> Any:
    managed = consent.list_managed(session, user_id=user_id)
    return ConsentStatus(
        has_managed_key=bool(managed),
        managed_integrations=[
            ManagedIntegrationPublic(id=m.id, name=m.name, created_at=m.created_at)
            for m in managed
        ],
    )
