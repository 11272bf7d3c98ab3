import logging
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.db import SessionLocal
from app.core.exceptions import AuthenticationError, PermissionDeniedError, ValidationError
from app.core.roles import Capability, Role, has_capability
from app.models.user import User
from app.schemas.auth import Principal
from app.services.identity_client import identity_client
from app.services.resource_storage import ResourceStorage, storage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    try:
        db = SessionLocal()
        yield db
    finally:
        db.close()


def get_storage() -> ResourceStorage:
    return storage


def _link_local_user(db: Session, principal: Principal) -> Principal:
    user = (
        db.query(User)
        .filter((User.supabase_id == principal.id) | (User.email == principal.email))
        .first()
    )
    if user:
        principal.user_id = user.id
    return principal


def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    if not credentials or not credentials.credentials:
        return None
    return _link_local_user(db, identity_client.get_user(credentials.credentials))


def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise AuthenticationError("Access token required")
    return principal


def actor_role(principal: Optional[Principal]) -> Role:
    return principal.role if principal else Role.USER


def acting_user_id(principal: Optional[Principal], explicit: Optional[int], field: str = "approver_id") -> int:
    """An explicit id wins; otherwise the caller's linked local user."""
    if explicit is not None:
        return explicit
    if principal is not None and principal.user_id is not None:
        return principal.user_id
    raise ValidationError(f"{field} is required", detail="No local user is linked to this token")


def require_capability(capability: Capability):
    def checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_capability(principal.role, capability):
            logger.info("User %s (%s) denied %s", principal.id, principal.role.value, capability.value)
            raise PermissionDeniedError(
                "Insufficient permissions",
                detail=f"Requires {capability.value}",
            )
        return principal

    return checker
