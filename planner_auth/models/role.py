"""ORM model for roles (named permission groups)."""

from sqlalchemy import Column, Integer, String

from planner_auth.models.base import Base


class Role(Base):
    """Role such as USER or ADMIN. Rows are seeded by migration, not created by the service."""

    __tablename__ = "role_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False, unique=True)
