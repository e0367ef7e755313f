"""Access control for the scrape endpoint.

Two kinds of caller may trigger a scrape:
- the scheduler, presenting ``X-Cron-Secret``
- a signed-in user holding the admin role, presenting ``Authorization: Bearer <jwt>``
"""

import hmac
from dataclasses import dataclass
from typing import Literal

from fastapi import Depends, Header

from outsyd_scraper.api.dependencies import get_store
from outsyd_scraper.config.settings import Settings, get_settings
from outsyd_scraper.core.exceptions import AuthenticationError, AuthorizationError
from outsyd_scraper.core.supabase_client import SupabaseClient
from outsyd_scraper.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScrapeCaller:
    """Who triggered the scrape."""

    kind: Literal["cron", "admin"]
    user_id: str | None = None


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def secret_matches(presented: str, expected: str | None) -> bool:
    """Constant-time comparison; an unset secret never matches."""
    if not expected:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


async def require_scrape_access(
    authorization: str | None = Header(default=None),
    x_cron_secret: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    store: SupabaseClient = Depends(get_store),
) -> ScrapeCaller:
    """Authorize a scrape request.

    Raises:
        AuthenticationError: No credentials, wrong secret or invalid session (401)
        AuthorizationError: Valid session without the admin role (403)
    """
    if x_cron_secret is not None:
        if secret_matches(x_cron_secret, settings.scrape_cron_secret):
            return ScrapeCaller(kind="cron")
        logger.warning("cron_secret_rejected")
        raise AuthenticationError("Invalid cron secret")

    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationError()

    user_id = await store.get_user_id(token)
    if not user_id:
        raise AuthenticationError("Invalid or expired session")

    if not await store.has_role(user_id, settings.admin_role):
        logger.warning("scrape_forbidden", user_id=user_id, role=settings.admin_role)
        raise AuthorizationError(settings.admin_role)

    return ScrapeCaller(kind="admin", user_id=user_id)
