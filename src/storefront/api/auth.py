"""Identity forwarded by the upstream identity provider.

The storefront never authenticates anyone itself: the gateway in front of it
sets ``X-User-Id`` (and ``X-User-Role`` for staff) on authenticated requests.
"""

from dataclasses import dataclass

import structlog
from fastapi import Depends, Header, HTTPException

logger = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


async def current_identity(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default=""),
) -> Identity:
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return Identity(user_id=user_id, role=x_user_role.strip().lower() or None)


async def current_user_id(identity: Identity = Depends(current_identity)) -> str:
    return identity.user_id


async def require_admin(identity: Identity = Depends(current_identity)) -> Identity:
    if not identity.is_admin:
        logger.warning("Admin access denied", user_id=identity.user_id, role=identity.role)
        raise HTTPException(status_code=403, detail="Forbidden")
    return identity
