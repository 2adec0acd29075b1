import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ConsentRequest(CamelModel):
    """Optional body of POST /consent. Both fields may be omitted."""

    team_id: Optional[str] = Field(default=None, alias="teamId")
    team_name: Optional[str] = Field(default=None, alias="teamName")

    @classmethod
    def from_payload(cls, payload: Any) -> "ConsentRequest":
        # Non-object bodies and non-string values count as absent
        if not isinstance(payload, dict):
            return cls()
        team_id = payload.get("teamId")
        team_name = payload.get("teamName")
        return cls(
            team_id=team_id if isinstance(team_id, str) and team_id else None,
            team_name=team_name if isinstance(team_name, str) and team_name else None,
        )


class ConsentGranted(CamelModel):
    success: bool = True
    has_managed_key: bool = Field(default=True, alias="hasManagedKey")
    managed_integration_id: str = Field(alias="managedIntegrationId")


class ConsentRevoked(CamelModel):
    success: bool = True
    has_managed_key: bool = Field(default=False, alias="hasManagedKey")


class ManagedIntegrationPublic(CamelModel):
    id: uuid.UUID
    name: str
    created_at: datetime = Field(alias="createdAt")


class ConsentStatus(CamelModel):
    has_managed_key: bool = Field(alias="hasManagedKey")
    managed_integrations: List[ManagedIntegrationPublic] = Field(
        default_factory=list, alias="managedIntegrations"
    )


class ErrorResponse(BaseModel):
    error: str
