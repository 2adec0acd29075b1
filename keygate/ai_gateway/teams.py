import logging
from typing import Optional

import httpx

from keygate.ai_gateway.client import VercelApiError, VercelClient

logger = logging.getLogger(__name__)

_LOOKUP_ERRORS = (VercelApiError, httpx.HTTPError, ValueError, AttributeError)


class TeamResolver:
    """
    Picks the Vercel team that will own a new managed key.

    First choice is the first team the token has full access to. If there is
    none (or the listing fails) the user's own id from userinfo stands in
    as the team id. Resolution is never cached; membership can change
    between requests.
    """

    def __init__(self, client: VercelClient):
        self.client = client

    async def resolve(self, access_token: str) -> Optional[str]:
        try:
            teams = await self.client.list_teams(access_token)
        except _LOOKUP_ERRORS as e:
            logger.warning(f"[ai-gateway] Team listing failed, falling back to userinfo: {e}")
            teams = []

        for team in teams:
            if isinstance(team, dict) and team.get("id") and not team.get("limited"):
                return str(team["id"])

        try:
            userinfo = await self.client.get_userinfo(access_token)
        except _LOOKUP_ERRORS as e:
            logger.warning(f"[ai-gateway] Userinfo lookup failed: {e}")
            return None

        if not isinstance(userinfo, dict):
            return None
        sub = userinfo.get("sub")
        return str(sub) if sub else None
