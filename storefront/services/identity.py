"""Identity collaborator backed by Supabase Auth."""
from typing import Optional

from supabase._async.client import AsyncClient

from storefront.logging import clip, get_logger
from storefront.services.models import AuthUser

logger = get_logger(__name__)


class Identity:
    """Resolves access tokens to the current shopper."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def current_user(self, access_token: Optional[str]) -> Optional[AuthUser]:
        """Return {id, email} for a valid access token, None otherwise."""
        if not access_token:
            return None

        try:
            response = await self.client.auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"Failed to resolve access token: {clip(e)}")
            return None

        user = getattr(response, "user", None) if response else None
        if user is None:
            return None

        return AuthUser(id=str(user.id), email=getattr(user, "email", None))
