"""Role/permission administration schemas"""

from pydantic import BaseModel, Field
from typing import List, Optional

_NAME_PART = r"^[A-Za-z0-9_.\-]+$"


class PermissionCreate(BaseModel):
    resource: str = Field(..., min_length=1, max_length=64, pattern=_NAME_PART)
    action: str = Field(..., min_length=1, max_length=64, pattern=_NAME_PART)
    description: Optional[str] = Field(None, max_length=255)


class PermissionResponse(BaseModel):
    id: str
    resource: str
    action: str
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=64, pattern=_NAME_PART)
    description: Optional[str] = Field(None, max_length=255)


class RoleResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    permissions: List[PermissionResponse] = []

    class Config:
        from_attributes = True


class AssignPermissionsRequest(BaseModel):
    permission_ids: List[str] = Field(..., max_length=200)


class AssignRoleRequest(BaseModel):
    role_id: str = Field(..., min_length=1)
