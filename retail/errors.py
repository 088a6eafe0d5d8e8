"""
Errors raised by the transaction use cases.

Each error is a user-actionable outcome except StorageFailure, which
stands in for any unexpected fault from a collaborator.
"""

from typing import Optional


class TransactionError(Exception):
    """Base class for transaction processing errors"""

    pass


class InvalidRequest(TransactionError):
    """Raised when input is missing or malformed"""

    pass


class NotFound(TransactionError):
    """Raised when a customer, product or transaction does not exist"""

    def __init__(self, resource: str, identifier: Optional[object] = None):
        self.resource = resource
        self.identifier = identifier
        if identifier is None:
            message = f"{resource.capitalize()} not found"
        else:
            message = f"{resource.capitalize()} with ID {identifier} not found"
        super().__init__(message)


class InsufficientStock(TransactionError):
    """Raised when a product has fewer units in stock than requested"""

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}"
        )


class StockConflict(TransactionError):
    """Raised when a product's stock changed between validation and write"""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(
            f"Stock for product {product_id} changed while the transaction "
            "was being written"
        )


class StorageFailure(TransactionError):
    """Raised when a storage collaborator fails unexpectedly"""

    pass
