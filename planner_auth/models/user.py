"""ORM model for application accounts (auth and RBAC)."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Table, func
from sqlalchemy.orm import relationship

from planner_auth.models.base import Base

user_role = Table(
    "user_role",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("user_data.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("role_data.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """
    Account for token authentication and role-based access control.

    username and email are unique case-insensitively. Only the bcrypt hash of
    the password is stored. Accounts are never deleted by the auth service.
    """

    __tablename__ = "user_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)

    roles = relationship("Role", secondary=user_role, lazy="selectin")
    activity = relationship("Activity", back_populates="user", uselist=False)

    @property
    def role_names(self) -> list[str]:
        return sorted(role.name for role in self.roles)


Index("ix_user_data_username_lower", func.lower(User.username), unique=True)
Index("ix_user_data_email_lower", func.lower(User.email), unique=True)
