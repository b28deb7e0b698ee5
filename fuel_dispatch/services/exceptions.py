from fuel_dispatch.core.retry import NonRetryableError, RetryableError


class AllocationDomainError(NonRetryableError):
    """Base class for all allocation domain errors."""
    status_code = 400
    error_code = "AllocationError"

class NotFoundError(AllocationDomainError):
    """Raised when an assignment, customer, truck, driver or ledger entry is missing, or a ledger entry belongs to another assignment."""
    status_code = 404
    error_code = "NotFound"

class InvalidQuantityError(AllocationDomainError):
    """Raised when a quantity is non-positive or exceeds the fuel available."""
    error_code = "InvalidQuantity"

class InvalidStateError(AllocationDomainError):
    """Raised when the allocation lifecycle forbids the requested change."""
    error_code = "InvalidState"

class AssignmentAlreadyCompletedError(InvalidStateError):
    """Raised when a new allocation targets an assignment that is already completed."""
    error_code = "AssignmentAlreadyCompleted"

class CustomerAlreadyAllocatedError(InvalidStateError):
    """Raised when the customer already has an allocation on the assignment."""

class TruckUnavailableError(InvalidStateError):
    """Raised when a truck is not in a state that accepts a new assignment."""

class DatabaseQueryError(AllocationDomainError):
    """Raised when a database statement fails for a non-transient reason."""
    status_code = 500
    error_code = "DatabaseError"

class ConcurrentUpdateError(RetryableError):
    """Raised when the assignment or truck rows could not be locked or the transaction was aborted by a concurrent writer."""
    status_code = 409
    error_code = "ConcurrentUpdate"
