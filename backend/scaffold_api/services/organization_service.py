"""Organization service - customer tenants, their members and white-label themes"""

from typing import List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scaffold_api.core.exceptions import ConflictError, ResourceNotFoundError
from scaffold_api.models.organization import Organization
from scaffold_api.models.user import User
from scaffold_api.schemas.organization import (
    CustomerThemeResponse,
    OrganizationCreate,
    OrganizationUpdate,
)

logger = logging.getLogger(__name__)


def _customer_id_taken(customer_id: str) -> ConflictError:
    return ConflictError(f"Organization with customer id '{customer_id}' already exists")


class OrganizationService:
    """CRUD over organizations plus membership and theme lookup"""

    @staticmethod
    def find_by_customer_id(db: Session, customer_id: str) -> Optional[Organization]:
        return db.query(Organization).filter(Organization.customer_id == customer_id).first()

    @staticmethod
    def create_organization(db: Session, data: OrganizationCreate) -> Organization:
        """
        Create an organization

        Raises:
            ConflictError: If the customer id is already used
        """
        if OrganizationService.find_by_customer_id(db, data.customer_id):
            raise _customer_id_taken(data.customer_id)

        organization = Organization(
            customer_id=data.customer_id,
            name=data.name,
            description=data.description,
            theme=data.theme.to_storage() if data.theme else None,
            is_active=data.is_active,
        )
        db.add(organization)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise _customer_id_taken(data.customer_id)
        db.refresh(organization)

        logger.info(f"Created organization {organization.id} ({organization.customer_id})")
        return organization

    @staticmethod
    def list_organizations(db: Session, skip: int = 0, limit: int = 100) -> List[Organization]:
        """Newest first"""
        return (
            db.query(Organization)
            .order_by(Organization.created_at.desc(), Organization.customer_id.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_organization(db: Session, organization_id: str) -> Organization:
        """
        Get an organization by id

        Raises:
            ResourceNotFoundError: If no organization has this id
        """
        organization = db.query(Organization).filter(Organization.id == organization_id).first()
        if not organization:
            raise ResourceNotFoundError("Organization")
        return organization

    @staticmethod
    def update_organization(db: Session, organization_id: str, data: OrganizationUpdate) -> Organization:
        """
        Apply a partial update

        Raises:
            ResourceNotFoundError: If no organization has this id
            ConflictError: If the new customer id belongs to another organization
        """
        organization = OrganizationService.get_organization(db, organization_id)
        changes = data.model_dump(exclude_unset=True)

        new_customer_id = changes.get("customer_id")
        if new_customer_id and new_customer_id != organization.customer_id:
            if OrganizationService.find_by_customer_id(db, new_customer_id):
                raise _customer_id_taken(new_customer_id)

        if "theme" in changes:
            changes["theme"] = data.theme.to_storage() if data.theme else None

        for field, value in changes.items():
            if value is None and field in ("customer_id", "name", "is_active"):
                continue
            setattr(organization, field, value)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise _customer_id_taken(new_customer_id or organization.customer_id)
        db.refresh(organization)
        return organization

    @staticmethod
    def delete_organization(db: Session, organization_id: str) -> None:
        organization = OrganizationService.get_organization(db, organization_id)
        db.delete(organization)
        db.commit()
        logger.info(f"Deleted organization: {organization_id}")

    @staticmethod
    def add_member(db: Session, organization_id: str, user_id: str) -> Organization:
        """
        Add a user to an organization

        Raises:
            ResourceNotFoundError: Unknown organization or user
            ConflictError: If the user is already a member
        """
        organization = OrganizationService.get_organization(db, organization_id)
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError("User")

        if any(member.id == user.id for member in organization.members):
            raise ConflictError("User is already a member of this organization")

        organization.members.append(user)
        db.commit()
        db.refresh(organization)
        logger.info(f"Added user {user.id} to organization {organization.id}")
        return organization

    @staticmethod
    def remove_member(db: Session, organization_id: str, user_id: str) -> Organization:
        """Remove a user from an organization; removing a non-member is a no-op."""
        organization = OrganizationService.get_organization(db, organization_id)
        remaining = [member for member in organization.members if member.id != user_id]
        if len(remaining) != len(organization.members):
            organization.members = remaining
            db.commit()
            db.refresh(organization)
            logger.info(f"Removed user {user_id} from organization {organization.id}")
        return organization

    @staticmethod
    def get_customer_theme(db: Session, customer_id: str) -> CustomerThemeResponse:
        """
        Theme for a white-label customer

        Raises:
            ResourceNotFoundError: If the customer is unknown or has no theme configured
        """
        organization = OrganizationService.find_by_customer_id(db, customer_id)
        if not organization:
            raise ResourceNotFoundError("Organization")
        if not organization.theme:
            raise ResourceNotFoundError("Customer theme")

        return CustomerThemeResponse(
            customer_id=organization.customer_id,
            customer_name=organization.name,
            theme=organization.theme,
            created_at=organization.created_at,
            updated_at=organization.updated_at,
        )


organization_service = OrganizationService()
