"""
Geography models
Zones, districts, towns, divisions and the location scopes attached to
roles and role groups
"""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from efiling.models.base import GUID, BaseModel


class Zone(BaseModel):
    __tablename__ = "zones"

    name = Column(String(255), nullable=False)


class District(BaseModel):
    __tablename__ = "districts"

    name = Column(String(255), nullable=False)
    zone_id = Column(GUID(), ForeignKey("zones.id"), nullable=True)


class Town(BaseModel):
    __tablename__ = "towns"

    name = Column(String(255), nullable=False)
    district_id = Column(GUID(), ForeignKey("districts.id"), nullable=True)


class Division(BaseModel):
    __tablename__ = "divisions"

    name = Column(String(255), nullable=False)
    department_id = Column(GUID(), ForeignKey("efiling_departments.id"), nullable=True)


class EfilingRoleLocation(BaseModel):
    """Locations a role is responsible for; source of a user's zone ids"""

    __tablename__ = "efiling_role_locations"

    role_id = Column(GUID(), ForeignKey("efiling_roles.id"), nullable=False, index=True)

    zone_id = Column(GUID(), ForeignKey("zones.id"), nullable=True)
    district_id = Column(GUID(), ForeignKey("districts.id"), nullable=True)
    town_id = Column(GUID(), ForeignKey("towns.id"), nullable=True)
    division_id = Column(GUID(), ForeignKey("divisions.id"), nullable=True)

    role = relationship("EfilingRole", back_populates="locations")


class RoleGroupLocation(BaseModel):
    """Locations a role group is visible in"""

    __tablename__ = "efiling_role_group_locations"

    role_group_id = Column(
        GUID(), ForeignKey("efiling_role_groups.id"), nullable=False, index=True
    )

    zone_id = Column(GUID(), ForeignKey("zones.id"), nullable=True)
    district_id = Column(GUID(), ForeignKey("districts.id"), nullable=True)
    town_id = Column(GUID(), ForeignKey("towns.id"), nullable=True)
    division_id = Column(GUID(), ForeignKey("divisions.id"), nullable=True)

    role_group = relationship("RoleGroup", back_populates="locations")
