"""
Domain models defined as Pydantic models.
These are pure data structures with validation.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class TransactionStatus(str, Enum):
    """Lifecycle status of a transaction.

    Any status may be set from any other; there is no transition graph.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Customer(BaseModel):
    customer_id: str


class Product(BaseModel):
    product_id: str
    name: str
    price: Decimal
    stock: int

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price must be non-negative")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock must be non-negative")
        return v


class TransactionItemRequest(BaseModel):
    """Request model for a single requested item.

    Values are checked by the order builder, not here, so that malformed
    items are reported through the same error path as every other
    invalid request.
    """

    product_id: Optional[str] = None
    quantity: Any = None


class CreateTransactionRequest(BaseModel):
    """Request model for creating a transaction."""

    customer_id: Optional[str] = None
    items: Optional[List[TransactionItemRequest]] = None


class ProcessedItem(BaseModel):
    """A requested item after validation against the catalog."""

    product_id: str
    quantity: int
    price_per_item: Decimal
    previous_stock: int
    remaining_stock: int

    @property
    def subtotal(self) -> Decimal:
        return self.price_per_item * self.quantity


class OrderDraft(BaseModel):
    """Validated, priced order that has not been persisted yet."""

    customer_id: str
    total_amount: Decimal
    items: List[ProcessedItem]

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[ProcessedItem]
    ) -> List[ProcessedItem]:
        if not v:
            raise ValueError("Transaction must contain at least one item")
        return v


class TransactionLineItem(BaseModel):
    item_id: int
    product_id: str
    product_name: Optional[str] = None
    quantity: int
    price_per_item: Decimal


class Transaction(BaseModel):
    transaction_id: int
    customer_id: str
    total_amount: Decimal
    status: TransactionStatus
    transaction_date: datetime
    items: List[TransactionLineItem] = Field(default_factory=list)


class TransactionRow(BaseModel):
    """One row of the transaction header joined with its line items.

    Item fields are None for a header that has no line items.
    """

    transaction_id: int
    customer_id: str
    total_amount: Decimal
    status: TransactionStatus
    transaction_date: datetime
    item_id: Optional[int] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    quantity: Optional[int] = None
    price_per_item: Optional[Decimal] = None
