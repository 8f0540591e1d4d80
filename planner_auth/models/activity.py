"""ORM model for account activation state."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from planner_auth.models.base import Base


class Activity(Base):
    """
    Activation record, one per account, written in the same transaction as the account.

    activated only ever goes from False to True. uuid is generated once and
    never changes; it is both the activation token and its lookup key.
    """

    __tablename__ = "activity"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("user_data.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    activated = Column(Boolean, nullable=False, default=False)
    uuid = Column(String(64), nullable=False, unique=True, index=True)

    user = relationship("User", back_populates="activity")
