from enum import Enum


class FuelType(str, Enum):
    DIESEL_B5 = "DIESEL_B5"
    DIESEL_B500 = "DIESEL_B500"
    GASOLINA_PREMIUM_95 = "GASOLINA_PREMIUM_95"
    GASOLINA_REGULAR_90 = "GASOLINA_REGULAR_90"
    GASOHOL_84 = "GASOHOL_84"
    GASOHOL_90 = "GASOHOL_90"
    GASOHOL_95 = "GASOHOL_95"
    SOLVENTE = "SOLVENTE"
    GASOL = "GASOL"


class TruckState(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    MAINTENANCE = "Maintenance"
    IN_TRANSIT = "InTransit"
    UNLOADING = "Unloading"
    ASSIGNED = "Assigned"


class AllocationStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Lifecycle order; a status update may never move an entry backwards
ALLOCATION_STATUS_ORDER = {
    AllocationStatus.PENDING: 0,
    AllocationStatus.IN_PROGRESS: 1,
    AllocationStatus.COMPLETED: 2,
}


class AssignmentStatus(str, Enum):
    OPEN = "Open"
    COMPLETED = "Completed"


class UserRole(str, Enum):
    OPERATOR = "Operator"
    ADMIN = "Admin"
    SUPER_ADMIN = "SuperAdmin"
