"""
Role & Geography Resolver
Resolves who a user is inside e-filing: role code, department and the
zone/district/town/division scope used for visibility filtering
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from efiling.core.config import settings
from efiling.models.geography import EfilingRoleLocation
from efiling.models.user import EfilingUser, User
from efiling.models.workflow import RoleGroup

logger = logging.getLogger(__name__)


@dataclass
class IdentityScope:
    """E-filing identity of a system user"""

    efiling_user_id: str
    user_id: str
    role_code: str
    department_id: Optional[str] = None
    zone_ids: List[str] = field(default_factory=list)
    district_id: Optional[str] = None
    town_id: Optional[str] = None
    division_id: Optional[str] = None
    is_global: bool = False


def record_matches(record, scope: Optional[IdentityScope]) -> bool:
    """
    Check whether a location-bearing record (file, role-group location, ...)
    falls inside a user's scope.

    Division, town or zone match; district only counts for users who are not
    pinned to a town.
    """
    if scope is None:
        return False
    if scope.is_global:
        return True

    division_id = getattr(record, "division_id", None)
    if division_id and scope.division_id and division_id == scope.division_id:
        return True

    town_id = getattr(record, "town_id", None)
    if town_id and scope.town_id and town_id == scope.town_id:
        return True

    zone_id = getattr(record, "zone_id", None)
    if zone_id and zone_id in scope.zone_ids:
        return True

    district_id = getattr(record, "district_id", None)
    if not scope.town_id and district_id and scope.district_id and district_id == scope.district_id:
        return True

    return False


def location_matches(file, scope: Optional[IdentityScope]) -> bool:
    """
    Check whether a user may receive a file located at ``file``.

    The file's most specific level decides: division must match exactly;
    town matches on town, falling back to district when the user has no
    town; district matches on district. Files without a location accept
    anyone, global scopes accept every file.
    """
    if file.division_id is None and file.town_id is None and file.district_id is None:
        return True
    if scope is None:
        return False
    if scope.is_global:
        return True

    if file.division_id is not None:
        return file.division_id == scope.division_id

    if file.town_id is not None and scope.town_id is not None:
        return file.town_id == scope.town_id

    return file.district_id is not None and file.district_id == scope.district_id


class GeographyResolver:
    """Read-only lookups of e-filing identity; never writes"""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, user_id: str) -> Optional[IdentityScope]:
        """Scope of an active e-filing participant, or None for everyone else"""
        profile = (
            self.db.query(EfilingUser)
            .filter(EfilingUser.user_id == user_id, EfilingUser.is_active == True)
            .first()
        )
        if profile is None:
            logger.debug(f"User {user_id} is not an active e-filing participant")
            return None
        return self.scope_for(profile)

    def scope_for(self, profile: EfilingUser) -> IdentityScope:
        zone_ids = []
        if profile.efiling_role_id:
            rows = (
                self.db.query(EfilingRoleLocation.zone_id)
                .filter(
                    EfilingRoleLocation.role_id == profile.efiling_role_id,
                    EfilingRoleLocation.zone_id.isnot(None),
                )
                .all()
            )
            zone_ids = sorted({row.zone_id for row in rows})

        role_code = profile.role_code
        return IdentityScope(
            efiling_user_id=profile.id,
            user_id=profile.user_id,
            role_code=role_code,
            department_id=profile.department_id,
            zone_ids=zone_ids,
            district_id=profile.district_id,
            town_id=profile.town_id,
            division_id=profile.division_id,
            is_global=role_code in settings.GLOBAL_ROLE_CODES,
        )

    @staticmethod
    def is_privileged(user: Optional[User], scope: Optional[IdentityScope] = None) -> bool:
        """System administrators and global roles bypass geography"""
        if user is not None and user.role in settings.ADMIN_ROLE_IDS:
            return True
        return scope is not None and scope.is_global

    def visible_role_groups(
        self,
        user: User,
        scope: Optional[IdentityScope] = None,
        is_active: Optional[bool] = None,
    ) -> List[RoleGroup]:
        """
        Role groups the user may see.

        Privileged users see everything. Everyone else sees groups without any
        location rows plus groups with at least one location in their scope.
        Users who are not e-filing participants see nothing.
        """
        query = self.db.query(RoleGroup)
        if is_active is not None:
            query = query.filter(RoleGroup.is_active == is_active)
        query = query.order_by(RoleGroup.name)

        if self.is_privileged(user, scope):
            return query.all()

        if scope is None:
            return []

        return [
            group
            for group in query.all()
            if not group.locations
            or any(record_matches(location, scope) for location in group.locations)
        ]
