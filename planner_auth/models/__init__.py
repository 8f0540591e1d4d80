"""SQLAlchemy ORM models."""

from planner_auth.models.activity import Activity
from planner_auth.models.base import Base
from planner_auth.models.role import Role
from planner_auth.models.user import User, user_role

__all__ = ["Activity", "Base", "Role", "User", "user_role"]
