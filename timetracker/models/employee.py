"""
Employee Model
HR profile, optionally linked one-to-one to a User account
"""

from sqlalchemy import Column, String, Boolean, Date, Float, ForeignKey, Uuid

from timetracker.models.base import BaseModel


class Employee(BaseModel):
    __tablename__ = "employees"

    employee_number = Column(String(50), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False, index=True)
    phone = Column(String(50), nullable=True)

    # Holds a department id as a plain string (not foreign-keyed)
    department = Column(String(64), nullable=False, index=True)
    position = Column(String(100), nullable=False)
    manager_id = Column(Uuid(as_uuid=True), nullable=True)
    hire_date = Column(Date, nullable=False)
    salary = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    employment_type = Column(String(20), default="full-time", nullable=False)

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True
    )

    def __repr__(self):
        return f"<Employee(number='{self.employee_number}', name='{self.first_name} {self.last_name}')>"
