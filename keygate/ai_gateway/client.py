"""
Thin async client for the Vercel REST API.

Every call is bearer-authenticated with the user's linked-account token and
bounded by an explicit timeout. Non-2xx responses raise VercelApiError;
transport problems surface as httpx.HTTPError.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from keygate.config import settings

logger = logging.getLogger(__name__)


class VercelApiError(Exception):
    def __init__(self, method: str, path: str, status_code: int, body: str):
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body
        super().__init__(f"{method} {path} returned {status_code}")


class VercelClient:
    def __init__(
        self,
        base_url: str = settings.VERCEL_API_BASE_URL,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or httpx.Timeout(
            settings.VERCEL_API_TIMEOUT_SECONDS,
            connect=settings.VERCEL_API_CONNECT_TIMEOUT_SECONDS,
        )
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        access_token: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            response = await client.request(
                method,
                path,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {access_token}"},
            )

        if response.is_error:
            raise VercelApiError(method, path, response.status_code, response.text)
        return response

    async def list_teams(self, access_token: str) -> List[Dict[str, Any]]:
        """Teams the token was granted access to."""
        response = await self._request("GET", "/v2/teams", access_token)
        teams = response.json().get("teams")
        return teams if isinstance(teams, list) else []

    async def get_userinfo(self, access_token: str) -> Dict[str, Any]:
        response = await self._request("GET", "/login/oauth/userinfo", access_token)
        return response.json()

    async def create_api_key(
        self, access_token: str, team_id: str, *, purpose: str, name: str
    ) -> Dict[str, Any]:
        """
        Create an API key on the team.

        `exchange=True` asks for the revocable exchange-token pattern instead
        of a long-lived static key.
        """
        response = await self._request(
            "POST",
            "/v1/api-keys",
            access_token,
            params={"teamId": team_id},
            json={"purpose": purpose, "name": name, "exchange": True},
        )
        return response.json()

    async def delete_api_key(self, access_token: str, api_key_id: str, team_id: str) -> None:
        await self._request(
            "DELETE",
            f"/v1/api-keys/{api_key_id}",
            access_token,
            params={"teamId": team_id},
        )
