"""
API Dependencies
Database session, bearer-token authentication and the request-scoped
context handed to services
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from efiling.core.config import settings
from efiling.core.exceptions import Forbidden, Unauthorized
from efiling.core.security import JWTManager
from efiling.db.database import get_db
from efiling.models.user import User
from efiling.schemas.base import canonical_uuid
from efiling.services.geography_resolver import GeographyResolver, IdentityScope

logger = logging.getLogger(__name__)

# Missing credentials are reported as 401 by get_current_user, not 403
security = HTTPBearer(auto_error=False)


@dataclass
class RequestContext:
    """Actor identity and database session for one request"""

    user: User
    identity: Optional[IdentityScope]
    db: Session
    request_id: Optional[str] = None
    ip_address: Optional[str] = None

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def efiling_user_id(self) -> Optional[str]:
        return self.identity.efiling_user_id if self.identity else None

    @property
    def is_admin(self) -> bool:
        return self.user.role in settings.ADMIN_ROLE_IDS

    @property
    def is_privileged(self) -> bool:
        return GeographyResolver.is_privileged(self.user, self.identity)


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Get current authenticated user from JWT token

    Raises:
        Unauthorized: If the token is missing, invalid or the user is inactive
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authentication required")

    payload = JWTManager.verify_token(credentials.credentials)
    if payload is None:
        raise Unauthorized("Invalid or expired token")

    try:
        user_id = canonical_uuid(payload.get("sub"))
    except ValueError:
        raise Unauthorized("Invalid or expired token")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.is_active:
        logger.warning(f"Token presented for unknown or inactive user {payload['sub']}")
        raise Unauthorized("User not found or inactive")

    return user


def get_request_context(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> RequestContext:
    return RequestContext(
        user=current_user,
        identity=GeographyResolver(db).resolve(current_user.id),
        db=db,
        request_id=getattr(request.state, "request_id", None),
        ip_address=request.client.host if request.client else None,
    )


def require_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """Allow only system administrators (role 1 or 2)"""
    if not ctx.is_admin:
        raise Forbidden("Administrator access required")
    return ctx


def require_participant(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """Allow only active e-filing participants"""
    if ctx.identity is None:
        raise Forbidden("You are not an active e-filing user")
    return ctx
