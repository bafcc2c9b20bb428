from fastapi import HTTPException, status

class OrderDeskException(HTTPException):
    """Base exception for OrderDesk Logic Errors."""
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

class ReferenceNotFoundError(OrderDeskException):
    """
    Raised when an id in a request does not resolve to a stored entity.
    Defaults to 404; order creation reports unresolved references as 400.
    """
    def __init__(self, resource_type: str, identifier, status_code: int = status.HTTP_404_NOT_FOUND):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(
            status_code=status_code,
            detail=f"{resource_type} with ID {identifier} not found."
        )

class InvalidArgumentError(OrderDeskException):
    """Strict 400 for values the business rules reject (e.g. quantity <= 0)."""
    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)

class ConcurrencyConflictError(OrderDeskException):
    """
    Raised when a version-guarded write matched no row: another request
    changed the entity since it was read.
    """
    def __init__(self, resource_type: str, identifier):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{resource_type} {identifier} was modified by another request. Reload and retry."
        )

class ReferenceInUseError(OrderDeskException):
    """Raised when deleting an entity that historical rows still point to."""
    def __init__(self, resource_type: str, identifier, referenced_by: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{resource_type} {identifier} is still referenced by {referenced_by}."
        )

class StoreFailureError(OrderDeskException):
    """
    Unexpected persistence error. The underlying cause is logged server-side
    and chained via ``raise ... from``; it is never part of the response.
    """
    def __init__(self, action: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal error while trying to {action}."
        )
