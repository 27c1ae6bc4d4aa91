# board_api/deps.py
from dataclasses import dataclass
from typing import FrozenSet, Literal, Optional

from fastapi import Depends, Header, HTTPException

from .config import settings
from .db import SessionLocal

UserPermission = Literal[
    "job_listings:job_listings_create",
    "job_listings:job_listings_update",
    "job_listings:job_listings_delete",
    "job_listings:job_listings_change_status",
    "job_listings_applications:job_listing_applications_change_rating",
    "job_listings_applications:job_listing_applications_change_stage",
]


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def require_api_key(x_api_key: str | None = Header(None)):
    """Require a matching X-API-Key header when API_KEY is configured.

    - If API_KEY is empty/missing, auth is effectively disabled (no-op).
    - If API_KEY is set and header doesn't match, raise 401.
    """
    if not settings.API_KEY:
        return
    if x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="Unauthorized: invalid API key")


# Identity comes from the auth provider's gateway, which forwards the signed-in
# user, the active organization and that member's permissions as headers.
@dataclass(frozen=True)
class OrgContext:
    user_id: str
    org_id: str
    permissions: FrozenSet[str]

    def has(self, permission: str) -> bool:
        return permission in self.permissions


def get_current_user_id(x_user_id: str | None = Header(None)) -> Optional[str]:
    return (x_user_id or "").strip() or None


def get_current_organization(
    x_user_id: str | None = Header(None),
    x_org_id: str | None = Header(None),
    x_org_permissions: str | None = Header(None),
) -> OrgContext:
    user_id = (x_user_id or "").strip()
    org_id = (x_org_id or "").strip()
    if not user_id or not org_id:
        raise HTTPException(status_code=401, detail="Unauthorized: organization membership required")
    permissions = frozenset(p.strip() for p in (x_org_permissions or "").split(",") if p.strip())
    return OrgContext(user_id=user_id, org_id=org_id, permissions=permissions)


def require_org_permission(permission: UserPermission):
    """Dependency factory: the caller's organization role must grant `permission`."""

    def _check(org: OrgContext = Depends(get_current_organization)) -> OrgContext:
        if not org.has(permission):
            raise HTTPException(status_code=403, detail=f"Forbidden: missing permission {permission}")
        return org

    return _check
