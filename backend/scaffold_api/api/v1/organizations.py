"""Organization routes"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from scaffold_api.core.database import get_db
from scaffold_api.schemas.organization import (
    OrganizationCreate,
    OrganizationDetailResponse,
    OrganizationResponse,
    OrganizationUpdate,
)
from scaffold_api.schemas.user import MessageResponse
from scaffold_api.services.organization_service import organization_service
from scaffold_api.api.deps import get_current_user, require_roles
from scaffold_api.models.user import User

router = APIRouter()

admin_only = require_roles("admin")


@router.get("/", response_model=List[OrganizationResponse])
def list_organizations(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return organization_service.list_organizations(db, skip=skip, limit=limit)


@router.get("/{organization_id}", response_model=OrganizationDetailResponse)
def get_organization(
    organization_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return organization_service.get_organization(db, organization_id)


@router.post("/", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
def create_organization(
    body: OrganizationCreate,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    """Create an organization; 409 if the customer id is taken"""
    return organization_service.create_organization(db, body)


@router.patch("/{organization_id}", response_model=OrganizationResponse)
def update_organization(
    organization_id: str,
    body: OrganizationUpdate,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return organization_service.update_organization(db, organization_id, body)


@router.delete("/{organization_id}", response_model=MessageResponse)
def delete_organization(
    organization_id: str,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    organization_service.delete_organization(db, organization_id)
    return MessageResponse(message="Organization deleted successfully")


@router.post("/{organization_id}/members/{user_id}", response_model=OrganizationDetailResponse)
def add_member(
    organization_id: str,
    user_id: str,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return organization_service.add_member(db, organization_id, user_id)


@router.delete("/{organization_id}/members/{user_id}", response_model=OrganizationDetailResponse)
def remove_member(
    organization_id: str,
    user_id: str,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return organization_service.remove_member(db, organization_id, user_id)
