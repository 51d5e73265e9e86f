"""White-label theme routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scaffold_api.core.database import get_db
from scaffold_api.schemas.organization import CustomerThemeResponse
from scaffold_api.services.organization_service import organization_service

router = APIRouter()


@router.get("/{customer_id}", response_model=CustomerThemeResponse)
def get_customer_theme(
    customer_id: str,
    db: Session = Depends(get_db)
):
    """
    Public theme lookup for a customer's branded frontend

    Returns 404 when the customer is unknown or has no theme configured.
    """
    return organization_service.get_customer_theme(db, customer_id)
