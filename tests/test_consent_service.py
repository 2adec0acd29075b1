"""Consent orchestration: grant and revoke against a faked Vercel API."""

import uuid
from unittest.mock import AsyncMock

import pytest

from keygate.ai_gateway.errors import (
    FeatureDisabled,
    IntegrationNotFound,
    KeyCreationFailed,
    MissingIntegrationId,
    NoLinkedAccount,
    NotAuthenticated,
    TeamUndetermined,
)
from keygate.ai_gateway.provisioner import CredentialProvisioner
from keygate.ai_gateway.schemas import ConsentRequest
from keygate.ai_gateway.service import ConsentService
from keygate.ai_gateway.teams import TeamResolver
from keygate.auth.models import Account
from keygate.integrations import crud_integration
from keygate.integrations.codec import ManagedKeyConfig
from keygate.integrations.crud_integration import PersistenceError
from keygate.integrations.models import Integration
from keygate.integrations.schemas import DEFAULT_MANAGED_INTEGRATION_NAME

store = crud_integration.integration


async def grant_key(service, session, user, **request):
    return await service.grant(session, user_id=user.id, request=ConsentRequest(**request))


# =============================================================================
# Gates
# =============================================================================


async def test_disabled_feature_short_circuits_before_auth(session, vercel_client, fake_vercel):
    service = ConsentService(
        managed_keys_enabled=False,
        team_resolver=TeamResolver(vercel_client),
        provisioner=CredentialProvisioner(vercel_client),
    )

    with pytest.raises(FeatureDisabled):
        await service.grant(session, user_id=None)
    with pytest.raises(FeatureDisabled):
        await service.revoke(session, user_id=None, integration_id="x")
    assert fake_vercel.requests == []


async def test_missing_session_is_not_authenticated(session, consent_service):
    with pytest.raises(NotAuthenticated):
        await consent_service.grant(session, user_id=None)
    with pytest.raises(NotAuthenticated):
        await consent_service.revoke(session, user_id=None, integration_id="x")


# =============================================================================
# Grant
# =============================================================================


async def test_grant_without_linked_account_makes_no_network_call(
    session, user, consent_service, fake_vercel
):
    with pytest.raises(NoLinkedAccount):
        await grant_key(consent_service, session, user)
    assert fake_vercel.requests == []


async def test_grant_with_account_missing_token_fails(session, user, consent_service, fake_vercel):
    session.add(Account(user_id=user.id, provider_id="vercel", account_id="sub", access_token=None))
    session.commit()

    with pytest.raises(NoLinkedAccount):
        await grant_key(consent_service, session, user)
    assert fake_vercel.requests == []


async def test_grant_with_other_provider_account_fails(session, user, consent_service, fake_vercel):
    session.add(Account(user_id=user.id, provider_id="github", account_id="gh", access_token="gho_x"))
    session.commit()

    with pytest.raises(NoLinkedAccount):
        await grant_key(consent_service, session, user)
    assert fake_vercel.requests == []


async def test_grant_resolves_team_and_stores_encrypted_config(
    session, user, vercel_account, consent_service, fake_vercel, codec
):
    fake_vercel.teams = (
        200,
        {"teams": [{"id": "t1", "limited": True}, {"id": "t2", "limited": False}]},
    )
    fake_vercel.create_key = (200, {"apiKeyString": "ak_123", "apiKey": {"id": "key_1"}})

    result = await grant_key(consent_service, session, user)

    assert result.team_id == "t2"
    rows = store.get_multi_managed_by_owner(session, user_id=user.id)
    assert [row.id for row in rows] == [result.integration_id]
    assert "ak_123" not in rows[0].config
    assert codec.decode(rows[0].config) == ManagedKeyConfig(
        api_key="ak_123", managed_key_id="key_1", team_id="t2"
    )
    assert rows[0].name == DEFAULT_MANAGED_INTEGRATION_NAME


async def test_explicit_team_skips_resolution(
    session, user, vercel_account, consent_service, fake_vercel
):
    result = await grant_key(consent_service, session, user, team_id="t_explicit", team_name="Acme")

    assert result.team_id == "t_explicit"
    assert fake_vercel.calls("GET", "/v2/teams") == []
    assert fake_vercel.calls("GET", "/login/oauth/userinfo") == []
    (create,) = fake_vercel.calls("POST", "/v1/api-keys")
    assert create.url.params["teamId"] == "t_explicit"
    assert session.get(Integration, result.integration_id).name == "Acme"


async def test_explicit_team_never_invokes_resolver(session, user, vercel_account, vercel_client):
    resolver = TeamResolver(vercel_client)
    resolver.resolve = AsyncMock(return_value="t_other")
    service = ConsentService(
        managed_keys_enabled=True,
        team_resolver=resolver,
        provisioner=CredentialProvisioner(vercel_client),
    )

    await grant_key(service, session, user, team_id="t_explicit")

    resolver.resolve.assert_not_called()


async def test_grant_twice_creates_two_managed_integrations(
    session, user, vercel_account, consent_service
):
    first = await grant_key(consent_service, session, user, team_id="t1")
    second = await grant_key(consent_service, session, user, team_id="t2")

    assert first.integration_id != second.integration_id
    assert len(store.get_multi_managed_by_owner(session, user_id=user.id)) == 2


async def test_undeterminable_team_fails(session, user, vercel_account, consent_service, fake_vercel):
    fake_vercel.teams = (500, "boom")
    fake_vercel.userinfo = (500, "boom")

    with pytest.raises(TeamUndetermined):
        await grant_key(consent_service, session, user)
    assert fake_vercel.calls("POST", "/v1/api-keys") == []


async def test_provider_rejection_fails_without_storing(
    session, user, vercel_account, consent_service, fake_vercel
):
    fake_vercel.create_key = (403, {"error": {"code": "forbidden"}})

    with pytest.raises(KeyCreationFailed):
        await grant_key(consent_service, session, user)
    assert store.get_multi_managed_by_owner(session, user_id=user.id) == []


async def test_provider_transport_error_becomes_creation_failure(
    session, user, vercel_account, consent_service, fake_vercel
):
    import httpx

    fake_vercel.create_key = httpx.ConnectError("connection refused")

    with pytest.raises(KeyCreationFailed):
        await grant_key(consent_service, session, user)


async def test_persistence_failure_revokes_the_new_remote_key(
    session, user, vercel_account, consent_service, fake_vercel, monkeypatch
):
    def fail(*args, **kwargs):
        raise PersistenceError("Failed to create integration")

    monkeypatch.setattr(store, "create_managed", fail)

    with pytest.raises(KeyCreationFailed):
        await grant_key(consent_service, session, user)

    (delete,) = fake_vercel.calls("DELETE", "/v1/api-keys/")
    assert delete.url.path == "/v1/api-keys/key_1"


# =============================================================================
# Revoke
# =============================================================================


async def test_revoke_requires_integration_id(session, user, consent_service):
    with pytest.raises(MissingIntegrationId):
        await consent_service.revoke(session, user_id=user.id, integration_id=None)
    with pytest.raises(MissingIntegrationId):
        await consent_service.revoke(session, user_id=user.id, integration_id="")


async def test_revoke_unknown_integration_is_not_found(session, user, consent_service):
    with pytest.raises(IntegrationNotFound):
        await consent_service.revoke(session, user_id=user.id, integration_id=str(uuid.uuid4()))


async def test_revoke_malformed_integration_id_is_not_found(session, user, consent_service):
    with pytest.raises(IntegrationNotFound):
        await consent_service.revoke(session, user_id=user.id, integration_id="not-a-uuid")


async def test_revoke_other_users_integration_is_not_found(
    session, user, vercel_account, consent_service, make_user
):
    granted = await grant_key(consent_service, session, user, team_id="t1")
    other = make_user(email="other@example.com")

    with pytest.raises(IntegrationNotFound):
        await consent_service.revoke(
            session, user_id=other.id, integration_id=str(granted.integration_id)
        )
    assert session.get(Integration, granted.integration_id) is not None


async def test_revoke_deletes_remote_key_then_local_row(
    session, user, vercel_account, consent_service, fake_vercel
):
    granted = await grant_key(consent_service, session, user, team_id="t1")

    result = await consent_service.revoke(
        session, user_id=user.id, integration_id=str(granted.integration_id)
    )

    assert result.remote_deletion.succeeded
    (delete,) = fake_vercel.calls("DELETE", "/v1/api-keys/")
    assert delete.url.path == "/v1/api-keys/key_1"
    assert delete.url.params["teamId"] == "t1"
    assert session.get(Integration, granted.integration_id) is None


async def test_revoke_twice_is_not_found_the_second_time(
    session, user, vercel_account, consent_service
):
    granted = await grant_key(consent_service, session, user, team_id="t1")
    integration_id = str(granted.integration_id)

    await consent_service.revoke(session, user_id=user.id, integration_id=integration_id)
    with pytest.raises(IntegrationNotFound):
        await consent_service.revoke(session, user_id=user.id, integration_id=integration_id)


async def test_revoke_with_undecryptable_config_skips_remote_delete(
    session, user, vercel_account, consent_service, fake_vercel
):
    integration_id = store.create_managed(
        session, user_id=user.id, name="Broken", config="gAAAAA-not-a-real-token"
    )

    result = await consent_service.revoke(
        session, user_id=user.id, integration_id=str(integration_id)
    )

    assert not result.remote_deletion.attempted
    assert fake_vercel.calls("DELETE", "/v1/api-keys/") == []
    assert session.get(Integration, integration_id) is None


async def test_revoke_with_config_missing_ids_skips_remote_delete(
    session, user, vercel_account, consent_service, fake_vercel, codec
):
    config = codec.encode(ManagedKeyConfig(api_key="ak_123"))
    integration_id = store.create_managed(session, user_id=user.id, name="Partial", config=config)

    result = await consent_service.revoke(
        session, user_id=user.id, integration_id=str(integration_id)
    )

    assert not result.remote_deletion.attempted
    assert fake_vercel.calls("DELETE", "/v1/api-keys/") == []
    assert session.get(Integration, integration_id) is None


async def test_revoke_remote_failure_still_deletes_locally(
    session, user, vercel_account, consent_service, fake_vercel
):
    granted = await grant_key(consent_service, session, user, team_id="t1")
    fake_vercel.delete_key = (500, "boom")

    result = await consent_service.revoke(
        session, user_id=user.id, integration_id=str(granted.integration_id)
    )

    assert result.remote_deletion.attempted
    assert not result.remote_deletion.succeeded
    assert result.remote_deletion.status_code == 500
    assert session.get(Integration, granted.integration_id) is None


async def test_revoke_without_linked_account_still_deletes_locally(
    session, user, vercel_account, consent_service, fake_vercel
):
    granted = await grant_key(consent_service, session, user, team_id="t1")
    session.delete(vercel_account)
    session.commit()

    result = await consent_service.revoke(
        session, user_id=user.id, integration_id=str(granted.integration_id)
    )

    assert not result.remote_deletion.attempted
    assert fake_vercel.calls("DELETE", "/v1/api-keys/") == []
    assert session.get(Integration, granted.integration_id) is None


async def test_list_managed_returns_only_callers_keys(
    session, user, vercel_account, consent_service, make_user
):
    await grant_key(consent_service, session, user, team_id="t1", team_name="One")
    await grant_key(consent_service, session, user, team_id="t2", team_name="Two")
    other = make_user(email="other@example.com")
    store.create_managed(session, user_id=other.id, name="Other", config="c")

    managed = consent_service.list_managed(session, user_id=user.id)

    assert sorted(m.name for m in managed) == ["One", "Two"]


async def test_numeric_team_id_still_grants(
    session, user, vercel_account, consent_service, fake_vercel, codec
):
    fake_vercel.teams = (200, {"teams": [{"id": 42, "limited": False}]})

    result = await grant_key(consent_service, session, user)

    assert result.team_id == "42"
    (row,) = store.get_multi_managed_by_owner(session, user_id=user.id)
    assert codec.decode(row.config).team_id == "42"
    assert fake_vercel.calls("DELETE", "/v1/api-keys/") == []
