import logging
from dataclasses import dataclass
from typing import Optional

from keygate.ai_gateway.client import VercelApiError, VercelClient

logger = logging.getLogger(__name__)

API_KEY_PURPOSE = "ai-gateway"
API_KEY_NAME = "Workflow Builder Gateway Key"


@dataclass(frozen=True)
class ProvisionedKey:
    token: str
    id: str


@dataclass(frozen=True)
class RemoteDeletion:
    """Outcome of a best-effort key deletion at the provider."""

    attempted: bool
    succeeded: bool = False
    status_code: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def skipped(cls, reason: str) -> "RemoteDeletion":
        return cls(attempted=False, error=reason)


class CredentialProvisioner:
    def __init__(self, client: VercelClient):
        self.client = client

    async def create(self, access_token: str, team_id: str) -> Optional[ProvisionedKey]:
        """
        Create one API key on the team. No retries.

        Returns None when the provider rejects the request or the response
        lacks the key string or key id.
        """
        try:
            payload = await self.client.create_api_key(
                access_token, team_id, purpose=API_KEY_PURPOSE, name=API_KEY_NAME
            )
        except VercelApiError as e:
            logger.error(
                f"[ai-gateway] Failed to create API key (status {e.status_code}): {e.body}"
            )
            return None

        token = payload.get("apiKeyString")
        api_key = payload.get("apiKey")
        key_id = api_key.get("id") if isinstance(api_key, dict) else None
        if not token or not key_id:
            logger.error("[ai-gateway] API key response is missing the key string or id")
            return None

        return ProvisionedKey(token=token, id=key_id)

    async def delete(self, access_token: str, api_key_id: str, team_id: str) -> RemoteDeletion:
        """Attempt to delete the key remotely; failures are reported, never raised."""
        try:
            await self.client.delete_api_key(access_token, api_key_id, team_id)
        except VercelApiError as e:
            logger.error(f"[ai-gateway] Failed to delete API key from Vercel: {e}")
            return RemoteDeletion(attempted=True, status_code=e.status_code, error=str(e))
        except Exception as e:
            logger.error(f"[ai-gateway] Failed to delete API key from Vercel: {e!r}")
            return RemoteDeletion(attempted=True, error=repr(e))

        logger.info(f"[ai-gateway] Deleted API key {api_key_id} on team {team_id}")
        return RemoteDeletion(attempted=True, succeeded=True)
