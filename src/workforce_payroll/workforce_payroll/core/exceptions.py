class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class EmployeeNotFound(NotFoundError):
    def __init__(self, employee_id: int):
        super().__init__(f"Employee {employee_id} not found")
        self.employee_id = employee_id


class PersistenceError(DomainError):
    """Raised when the store cannot be read or written (network, timeout, lock)."""


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""
