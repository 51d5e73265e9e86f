"""Organization and white-label theme schemas"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import datetime

from scaffold_api.schemas.user import UserResponse

CUSTOMER_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]*$"


class ThemeColors(BaseModel):
    """One color palette; values are CSS color strings, keys are camelCase on the wire"""
    background: str
    foreground: str
    card: str
    card_foreground: str
    popover: str
    popover_foreground: str
    primary: str
    primary_foreground: str
    secondary: str
    secondary_foreground: str
    muted: str
    muted_foreground: str
    accent: str
    accent_foreground: str
    destructive: str
    destructive_foreground: str
    border: str
    input: str
    ring: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Theme(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    light: ThemeColors
    dark: Optional[ThemeColors] = None
    radius: Optional[str] = Field(None, max_length=32)

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class OrganizationCreate(BaseModel):
    customer_id: str = Field(..., min_length=1, max_length=64, pattern=CUSTOMER_ID_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    theme: Optional[Theme] = None
    is_active: bool = True


class OrganizationUpdate(BaseModel):
    """Partial update; sending ``theme: null`` removes the theme"""
    customer_id: Optional[str] = Field(None, min_length=1, max_length=64, pattern=CUSTOMER_ID_PATTERN)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    theme: Optional[Theme] = None
    is_active: Optional[bool] = None


class OrganizationResponse(BaseModel):
    id: str
    customer_id: str
    name: str
    description: Optional[str] = None
    theme: Optional[Dict[str, Any]] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrganizationDetailResponse(OrganizationResponse):
    """Organization with its member list"""
    members: List[UserResponse] = []


class CustomerThemeResponse(BaseModel):
    """Theme served to a white-label frontend"""
    customer_id: str
    customer_name: str
    theme: Dict[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
