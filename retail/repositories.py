"""
Repository interfaces defined as Protocols.

All repository operations in this module follow these principles:

- **Domain Objects**: Methods accept and return domain objects or
  primitives, never driver-specific types such as database records.

- **Absence is not an error**: lookups return None for a missing record
  and mutations report the number of affected rows. Deciding whether a
  missing record is a failure belongs to the use cases.

- **Atomic writes**: everything written while creating a transaction
  (header, line items, stock updates) goes through a TransactionWriter
  obtained from TransactionRepository.atomic(). Either all of it is
  committed or none of it is.

Architectural Notes:

- These are pure interfaces with no implementation details
- Use case classes depend on these protocols, not concrete
  implementations
- Implementations live under retail/repos/ (memory and postgresql)
"""

from decimal import Decimal
from typing import AsyncContextManager, List, Optional, Protocol
from typing import runtime_checkable

from retail.domain import (
    Customer,
    Product,
    TransactionRow,
    TransactionStatus,
)


@runtime_checkable
class CustomerRepository(Protocol):
    """Read access to the customer registry."""

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Retrieve a customer by ID.

        Args:
            customer_id: Unique customer identifier

        Returns:
            Customer object if found, None otherwise
        """
        ...


@runtime_checkable
class ProductRepository(Protocol):
    """Read access to the product catalog.

    Stock is only ever written through TransactionWriter, inside the unit
    of work that records the transaction consuming it.
    """

    async def get_product(self, product_id: str) -> Optional[Product]:
        """Retrieve a product with its current price and stock.

        Args:
            product_id: Unique product identifier

        Returns:
            Product object if found, None otherwise
        """
        ...


@runtime_checkable
class TransactionWriter(Protocol):
    """Write operations bound to a single storage transaction.

    Instances are only valid inside the `async with repo.atomic()` block
    that produced them.
    """

    async def create_transaction_header(
        self,
        customer_id: str,
        total_amount: Decimal,
        status: TransactionStatus,
    ) -> int:
        """Insert a transaction header.

        Returns:
            The identifier assigned to the new transaction
        """
        ...

    async def append_transaction_item(
        self,
        transaction_id: int,
        product_id: str,
        quantity: int,
        price_per_item: Decimal,
    ) -> None:
        """Append a line item to a transaction written in this unit."""
        ...

    async def update_product_stock(
        self, product_id: str, new_stock: int, expected_stock: int
    ) -> None:
        """Set a product's stock, provided it still equals expected_stock.

        Raises:
            StockConflict: If the stored stock no longer matches
                expected_stock. The enclosing unit is rolled back.
        """
        ...


@runtime_checkable
class TransactionRepository(Protocol):
    """Persistence for transactions and their line items."""

    def atomic(self) -> AsyncContextManager[TransactionWriter]:
        """Open a unit of work.

        Leaving the block normally commits every write made through the
        yielded writer. Leaving it with an exception rolls all of them
        back and re-raises.
        """
        ...

    async def fetch_rows(
        self,
        transaction_id: Optional[int] = None,
        customer_id: Optional[str] = None,
    ) -> List[TransactionRow]:
        """Fetch header rows joined with their line items.

        Args:
            transaction_id: Restrict to one transaction
            customer_id: Restrict to one customer's transactions

        Returns:
            Flat rows ordered by transaction id, then item id. A
            transaction with K line items yields K rows; one with none
            yields a single row whose item fields are None.
        """
        ...

    async def update_status(
        self, transaction_id: int, status: TransactionStatus
    ) -> int:
        """Overwrite a transaction's status.

        Returns:
            Number of rows affected (0 when the transaction is unknown)
        """
        ...

    async def delete_transaction(self, transaction_id: int) -> int:
        """Delete a transaction together with its line items.

        Returns:
            Number of transactions removed (0 when unknown)
        """
        ...
