"""User model"""

import uuid

from sqlalchemy import Column, String, Boolean, DateTime, JSON, Index, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from scaffold_api.core.database import Base
from scaffold_api.models.rbac import user_roles
from scaffold_api.models.organization import user_organizations


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """User identity record for password and OAuth authentication"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # NULL for OAuth-only accounts
    name = Column(String(255), nullable=True)
    auth_provider = Column(String(32), nullable=True)
    auth_provider_id = Column(String(255), nullable=True)
    auth_provider_data = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    roles = relationship("Role", secondary=user_roles, back_populates="users", lazy="selectin")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    organizations = relationship("Organization", secondary=user_organizations, back_populates="members")

    __table_args__ = (
        UniqueConstraint("auth_provider", "auth_provider_id", name="uq_users_auth_provider_identity"),
        Index("idx_users_auth_provider", "auth_provider", "auth_provider_id"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', provider='{self.auth_provider}')>"

    @property
    def role_names(self):
        return [role.name for role in self.roles]

