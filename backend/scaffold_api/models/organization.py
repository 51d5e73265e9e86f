"""Organization (white-label customer) model"""

import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, ForeignKey, Table
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from scaffold_api.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


user_organizations = Table(
    "user_organizations",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column(
        "organization_id",
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Organization(Base):
    """Customer tenant; ``customer_id`` is the public key its theme is served under"""

    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=_new_id)
    customer_id = Column(String(64), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    theme = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    members = relationship(
        "User", secondary=user_organizations, back_populates="organizations", lazy="selectin"
    )

    def __repr__(self):
        return f"<Organization(id={self.id}, customer_id='{self.customer_id}')>"
