"""
Identity models
System users and their e-filing profiles (role, department, geography)
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from efiling.models.base import GUID, BaseModel


class User(BaseModel):
    """System user owned by the authentication subsystem"""

    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    designation = Column(String(255), nullable=True)

    # System role; 1 and 2 are administrator codes
    role = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    efiling_profile = relationship("EfilingUser", back_populates="user", uselist=False)

    def __repr__(self):
        return f"<User(name='{self.name}', role={self.role})>"


class Department(BaseModel):
    """Organizational department"""

    __tablename__ = "efiling_departments"

    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, nullable=True)
    department_type = Column(
        String(50), default="district", nullable=False
    )  # district, town, division, department, global
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Department(name='{self.name}', type='{self.department_type}')>"


class EfilingRole(BaseModel):
    """E-filing role such as EEXEN, SE_CEN or CEO"""

    __tablename__ = "efiling_roles"

    code = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    department_id = Column(GUID(), ForeignKey("efiling_departments.id"), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    locations = relationship("EfilingRoleLocation", back_populates="role")

    def __repr__(self):
        return f"<EfilingRole(code='{self.code}')>"


class EfilingUser(BaseModel):
    """E-filing participant profile of a system user"""

    __tablename__ = "efiling_users"

    user_id = Column(GUID(), ForeignKey("users.id"), nullable=False, unique=True)
    efiling_role_id = Column(GUID(), ForeignKey("efiling_roles.id"), nullable=True)
    department_id = Column(GUID(), ForeignKey("efiling_departments.id"), nullable=True)

    # Geography
    district_id = Column(GUID(), ForeignKey("districts.id"), nullable=True)
    town_id = Column(GUID(), ForeignKey("towns.id"), nullable=True)
    division_id = Column(GUID(), ForeignKey("divisions.id"), nullable=True)

    designation = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Capability flags
    can_sign = Column(Boolean, default=False, nullable=False)
    can_approve_files = Column(Boolean, default=False, nullable=False)
    can_create_files = Column(Boolean, default=True, nullable=False)
    is_consultant = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="efiling_profile")
    role = relationship("EfilingRole")
    department = relationship("Department")
    district = relationship("District")
    town = relationship("Town")
    division = relationship("Division")

    @property
    def role_code(self) -> str:
        if self.role is None or not self.role.code:
            return ""
        return self.role.code.upper()

    @property
    def display_name(self) -> str:
        if self.user is not None and self.user.name:
            return self.user.name
        return "user"

    @property
    def location_label(self):
        """Most specific geography name for display"""
        for place in (self.division, self.town, self.district):
            if place is not None:
                return place.name
        return None

    def __repr__(self):
        return f"<EfilingUser(user_id='{self.user_id}', active={self.is_active})>"
