"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Requested record does not exist"""

    pass


class LeaseNotFoundError(NotFoundError):
    def __init__(self, lease_id: str):
        self.lease_id = lease_id
        super().__init__(f"Lease not found: {lease_id}")


class DispositionNotFoundError(NotFoundError):
    def __init__(self, lease_id: str):
        self.lease_id = lease_id
        super().__init__(f"Deposit disposition not found for lease {lease_id}")


class DamageItemNotFoundError(NotFoundError):
    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Damage item not found: {item_id}")


class InspectionNotFoundError(NotFoundError):
    def __init__(self, inspection_id: str):
        self.inspection_id = inspection_id
        super().__init__(f"Inspection not found: {inspection_id}")


class ConflictError(DomainException):
    """Operation was already performed"""

    pass


class DispositionAlreadyInitiatedError(ConflictError):
    def __init__(self, lease_id: str):
        self.lease_id = lease_id
        super().__init__(f"Move-out process already initiated for lease {lease_id}")


class DispositionValidationError(DomainException):
    """Input data is malformed or inconsistent (caller must fix it)"""

    pass


class InvalidTransitionError(DomainException):
    """Lifecycle step attempted from an incompatible status"""

    def __init__(self, current: str, action: str):
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} while disposition is {current}")


class StoreError(DomainException):
    """Persistence layer failed or is unavailable"""

    pass
