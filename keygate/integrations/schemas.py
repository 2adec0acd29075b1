import uuid
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from keygate.integrations.models import Integration

AI_GATEWAY_INTEGRATION_TYPE = "ai-gateway"
DEFAULT_MANAGED_INTEGRATION_NAME = "AI Gateway"


class ManagedIntegration(BaseModel):
    """A credential this system provisioned and must revoke remotely."""

    kind: Literal["managed"] = "managed"
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    type: Literal["ai-gateway"] = AI_GATEWAY_INTEGRATION_TYPE
    config: str
    created_at: datetime


class UserIntegration(BaseModel):
    """A credential the user pasted in themselves."""

    kind: Literal["user"] = "user"
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    type: str
    config: str
    created_at: datetime


IntegrationRecord = Annotated[
    Union[ManagedIntegration, UserIntegration], Field(discriminator="kind")
]


def to_record(row: Integration) -> IntegrationRecord:
    """
    Map a flat integration row onto its variant.

    A managed row with any type other than the AI Gateway type fails
    validation rather than producing a half-valid record.
    """
    fields = dict(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        type=row.type,
        config=row.config,
        created_at=row.created_at,
    )
    if row.is_managed:
        return ManagedIntegration(**fields)
    return UserIntegration(**fields)
