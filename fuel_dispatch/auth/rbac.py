from enum import Enum
from typing import Set

from fastapi import Depends, HTTPException

from fuel_dispatch.auth.auth_bearer import JWTBearer
from fuel_dispatch.models.enums import UserRole


class Permission(str, Enum):
    """All application permissions (fine-grained access control)"""

    VIEW_ASSIGNMENTS = "view:assignments"
    CREATE_ASSIGNMENT = "create:assignment"
    CREATE_ALLOCATION = "create:allocation"
    UPDATE_DELIVERY = "update:delivery"
    DELETE_ALLOCATION = "delete:allocation"
    REFRESH_FLEET = "refresh:fleet"


# Permission matrix - what each role can do
ROLE_PERMISSIONS: dict[UserRole, Set[Permission]] = {
    UserRole.OPERATOR: {
        Permission.VIEW_ASSIGNMENTS,
        Permission.UPDATE_DELIVERY,  # Drivers confirm their own deliveries
    },
    UserRole.ADMIN: {
        Permission.VIEW_ASSIGNMENTS,
        Permission.CREATE_ASSIGNMENT,
        Permission.CREATE_ALLOCATION,
        Permission.UPDATE_DELIVERY,
        Permission.DELETE_ALLOCATION,
        Permission.REFRESH_FLEET,
    },
    UserRole.SUPER_ADMIN: set(Permission),  # All permissions
}


def has_permission(role: str, permission: Permission) -> bool:
    try:
        return permission in ROLE_PERMISSIONS[UserRole(role)]
    except ValueError:
        return False


def require_permission(permission: Permission):
    """Dependency factory rejecting callers whose role lacks `permission`."""
    async def checker(payload: dict = Depends(JWTBearer())) -> dict:
        if not has_permission(payload.get("role"), permission):
            raise HTTPException(status_code=403, detail="Access denied")
        return payload
    return checker
