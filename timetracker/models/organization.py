"""
Organization and Department Models
"""

from sqlalchemy import Column, String, Text, ForeignKey, Uuid

from timetracker.models.base import BaseModel


class Organization(BaseModel):
    """Top-level organizational unit"""
    __tablename__ = "organizations"

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self):
        return f"<Organization(name='{self.name}')>"


class Department(BaseModel):
    """Department inside an organization, optionally led by an employee"""
    __tablename__ = "departments"

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    organization_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    manager_id = Column(Uuid(as_uuid=True), ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self):
        return f"<Department(name='{self.name}')>"
