"""
Consent workflow for managed AI Gateway keys.

Grant: feature gate -> session -> linked Vercel account -> team -> create key
-> encrypt config -> store. Revoke: feature gate -> session -> stored row ->
decrypt config -> best-effort remote delete -> local delete.

Local deletion always comes after the remote attempt: if the process dies in
between, a stray local row remains (and can be revoked again) instead of a
live remote key with no local record.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlmodel import Session

from keygate.ai_gateway.client import VercelClient
from keygate.ai_gateway.errors import (
    FeatureDisabled,
    IntegrationNotFound,
    KeyCreationFailed,
    MissingIntegrationId,
    NoLinkedAccount,
    NotAuthenticated,
    TeamUndetermined,
)
from keygate.ai_gateway.provisioner import CredentialProvisioner, RemoteDeletion
from keygate.ai_gateway.schemas import ConsentRequest
from keygate.ai_gateway.teams import TeamResolver
from keygate.auth import crud_user
from keygate.auth.models import VERCEL_PROVIDER_ID
from keygate.integrations import crud_integration
from keygate.integrations.codec import DecodeFailure, ManagedKeyConfig, SecureConfigCodec
from keygate.integrations.schemas import DEFAULT_MANAGED_INTEGRATION_NAME, ManagedIntegration
from keygate.utils.feature_flags import AI_GATEWAY_MANAGED_KEYS, is_enabled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrantResult:
    integration_id: uuid.UUID
    team_id: str


@dataclass(frozen=True)
class RevokeResult:
    integration_id: uuid.UUID
    remote_deletion: RemoteDeletion


class ConsentService:
    def __init__(
        self,
        *,
        managed_keys_enabled: bool,
        team_resolver: TeamResolver,
        provisioner: CredentialProvisioner,
        codec: Optional[SecureConfigCodec] = None,
        integrations: crud_integration.CRUDIntegration = crud_integration.integration,
        accounts: crud_user.CRUDAccount = crud_user.account,
    ):
        self.managed_keys_enabled = managed_keys_enabled
        self.team_resolver = team_resolver
        self.provisioner = provisioner
        self.codec = codec or SecureConfigCodec()
        self.integrations = integrations
        self.accounts = accounts

    @classmethod
    def from_settings(cls, client: Optional[VercelClient] = None) -> "ConsentService":
        """Build the service, reading the feature flag once."""
        client = client or VercelClient()
        return cls(
            managed_keys_enabled=is_enabled(AI_GATEWAY_MANAGED_KEYS),
            team_resolver=TeamResolver(client),
            provisioner=CredentialProvisioner(client),
        )

    def _authorize(self, user_id: Optional[uuid.UUID]) -> uuid.UUID:
        if not self.managed_keys_enabled:
            raise FeatureDisabled()
        if user_id is None:
            raise NotAuthenticated()
        return user_id

    def _linked_access_token(self, session: Session, user_id: uuid.UUID) -> Optional[str]:
        account = self.accounts.get_by_user_and_provider(
            session, user_id=user_id, provider_id=VERCEL_PROVIDER_ID
        )
        if account is None or account.provider_id != VERCEL_PROVIDER_ID:
            return None
        return account.access_token or None

    async def grant(
        self,
        session: Session,
        *,
        user_id: Optional[uuid.UUID],
        request: Optional[ConsentRequest] = None,
    ) -> GrantResult:
        user_id = self._authorize(user_id)
        request = request or ConsentRequest()

        access_token = self._linked_access_token(session, user_id)
        if not access_token:
            raise NoLinkedAccount()

        # An explicit team from the caller always wins over auto-detection
        team_id = request.team_id
        if not team_id:
            team_id = await self.team_resolver.resolve(access_token)
        if not team_id:
            raise TeamUndetermined()

        key = None
        try:
            key = await self.provisioner.create(access_token, team_id)
            if key is None:
                raise KeyCreationFailed()

            config = self.codec.encode(
                ManagedKeyConfig(api_key=key.token, managed_key_id=key.id, team_id=team_id)
            )
            integration_id = self.integrations.create_managed(
                session,
                user_id=user_id,
                name=request.team_name or DEFAULT_MANAGED_INTEGRATION_NAME,
                config=config,
            )
        except KeyCreationFailed:
            raise
        except Exception as e:
            logger.exception(f"[ai-gateway] Error creating API key: {e!r}")
            if key is not None:
                # The key exists remotely but was never recorded locally
                await self.provisioner.delete(access_token, key.id, team_id)
            raise KeyCreationFailed() from e

        logger.info(f"[ai-gateway] Created managed integration {integration_id} for team {team_id}")
        return GrantResult(integration_id=integration_id, team_id=team_id)

    async def revoke(
        self,
        session: Session,
        *,
        user_id: Optional[uuid.UUID],
        integration_id: Optional[str],
    ) -> RevokeResult:
        user_id = self._authorize(user_id)

        if not integration_id:
            raise MissingIntegrationId()
        try:
            integration_uuid = uuid.UUID(integration_id)
        except ValueError:
            raise IntegrationNotFound() from None

        managed = self.integrations.get_managed(session, id=integration_uuid, user_id=user_id)
        if managed is None:
            raise IntegrationNotFound()

        remote_deletion = await self._delete_remote_key(session, user_id, managed)

        self.integrations.remove(session, id=managed.id)
        logger.info(
            f"[ai-gateway] Removed managed integration {managed.id} "
            f"(remote deletion attempted={remote_deletion.attempted}, "
            f"succeeded={remote_deletion.succeeded})"
        )
        return RevokeResult(integration_id=managed.id, remote_deletion=remote_deletion)

    async def _delete_remote_key(
        self, session: Session, user_id: uuid.UUID, managed: ManagedIntegration
    ) -> RemoteDeletion:
        config = self.codec.decode(managed.config)
        if isinstance(config, DecodeFailure):
            logger.error(f"[ai-gateway] Failed to decrypt config: {config.reason}")
            return RemoteDeletion.skipped(config.reason)
        if not config.is_revocable:
            return RemoteDeletion.skipped("config has no key id or team id")

        access_token = self._linked_access_token(session, user_id)
        if not access_token:
            return RemoteDeletion.skipped("no linked Vercel account")

        return await self.provisioner.delete(access_token, config.managed_key_id, config.team_id)

    def list_managed(
        self, session: Session, *, user_id: Optional[uuid.UUID]
    ) -> list[ManagedIntegration]:
        user_id = self._authorize(user_id)
        return self.integrations.get_multi_managed_by_owner(session, user_id=user_id)
