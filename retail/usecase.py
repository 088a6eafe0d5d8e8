"""
usecase logic must be clean, without direct dependencies.
dependencies are injected via repository instances.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from retail.aggregation import aggregate_rows
from retail.domain import (
    CreateTransactionRequest,
    OrderDraft,
    ProcessedItem,
    Transaction,
    TransactionItemRequest,
    TransactionRow,
    TransactionStatus,
)
from retail.errors import (
    InsufficientStock,
    InvalidRequest,
    NotFound,
    StorageFailure,
    TransactionError,
)
from retail.repositories import (
    CustomerRepository,
    ProductRepository,
    TransactionRepository,
)
from retail.validation import (
    ensure_customer_repository,
    ensure_product_repository,
    ensure_transaction_repository,
)

logger = logging.getLogger(__name__)

VALID_STATUSES = frozenset(status.value for status in TransactionStatus)


def _is_positive_int(value: Any) -> bool:
    return (
        isinstance(value, int) and not isinstance(value, bool) and value > 0
    )


class OrderBuilder:
    """
    Validates a requested item list against the catalog and prices it.

    The builder only reads from its repositories. Everything it decides
    (total, price snapshots, post-order stock levels) is returned as an
    OrderDraft for the writer to persist, so a failure on any item leaves
    storage untouched.
    """

    def __init__(
        self,
        customer_repo: CustomerRepository,
        product_repo: ProductRepository,
    ) -> None:
        self.customer_repo = ensure_customer_repository(customer_repo)
        self.product_repo = ensure_product_repository(product_repo)

    async def build(
        self,
        customer_id: Optional[str],
        items: Optional[Sequence[TransactionItemRequest]],
    ) -> OrderDraft:
        """
        Validate and price an order.

        Checks run in a fixed order and the first failure wins:
        1. Request shape (customer id, non-empty item list).
        2. Customer existence.
        3. Each item in input order: product id and positive integer
           quantity, then product existence, then stock. Items after a
           failing one are never looked up.

        A product requested more than once draws on the stock left by its
        earlier lines, so the draft never promises the same unit twice.

        Raises:
            InvalidRequest: If the request is malformed
            NotFound: If the customer or a product does not exist
            InsufficientStock: If a product cannot cover its quantity
        """
        if (
            not customer_id
            or not customer_id.strip()
            or not isinstance(items, (list, tuple))
            or not items
        ):
            raise InvalidRequest(
                "Customer ID and a non-empty list of items are required"
            )

        customer = await self.customer_repo.get_customer(customer_id)
        if customer is None:
            logger.info(
                "Order rejected: customer not found",
                extra={"customer_id": customer_id},
            )
            raise NotFound("customer", customer_id)

        total_amount = Decimal("0")
        processed_items: List[ProcessedItem] = []
        # Stock left for products already seen earlier in this order
        running_stock: Dict[str, int] = {}

        for position, item in enumerate(items):
            if not item.product_id or not _is_positive_int(item.quantity):
                raise InvalidRequest(
                    f"Item {position} must have a product ID and a "
                    "positive integer quantity"
                )

            product = await self.product_repo.get_product(item.product_id)
            if product is None:
                logger.info(
                    "Order rejected: product not found",
                    extra={
                        "customer_id": customer_id,
                        "product_id": item.product_id,
                    },
                )
                raise NotFound("product", item.product_id)

            available = running_stock.get(product.product_id, product.stock)
            if available < item.quantity:
                logger.info(
                    "Order rejected: insufficient stock",
                    extra={
                        "customer_id": customer_id,
                        "product_id": product.product_id,
                        "requested": item.quantity,
                        "available": available,
                    },
                )
                raise InsufficientStock(product.name, available)

            remaining = available - item.quantity
            running_stock[product.product_id] = remaining
            total_amount += product.price * item.quantity

            processed_items.append(
                ProcessedItem(
                    product_id=product.product_id,
                    quantity=item.quantity,
                    price_per_item=product.price,
                    previous_stock=available,
                    remaining_stock=remaining,
                )
            )

        logger.debug(
            "Order validated",
            extra={
                "customer_id": customer_id,
                "item_count": len(processed_items),
                "total_amount": str(total_amount),
            },
        )
        return OrderDraft(
            customer_id=customer_id,
            total_amount=total_amount,
            items=processed_items,
        )


class CreateTransactionUseCase:
    """
    Use case for creating a transaction from a customer's item list.

    Validation and pricing are delegated to OrderBuilder. Persistence
    happens inside one unit of work: the header first, then a line item
    and a stock update per processed item, in item order. If any write
    fails the whole unit is rolled back.
    """

    def __init__(
        self,
        customer_repo: CustomerRepository,
        product_repo: ProductRepository,
        transaction_repo: TransactionRepository,
    ) -> None:
        self.builder = OrderBuilder(customer_repo, product_repo)
        self.transaction_repo = ensure_transaction_repository(
            transaction_repo
        )

    async def create_transaction(
        self, request: CreateTransactionRequest
    ) -> int:
        """
        Validate, price and persist a new pending transaction.

        Returns:
            The new transaction's identifier

        Raises:
            InvalidRequest, NotFound, InsufficientStock: From validation
            StockConflict: If stock changed after validation
            StorageFailure: If a repository fails unexpectedly
        """
        logger.debug(
            "Starting transaction creation",
            extra={
                "customer_id": request.customer_id,
                "item_count": len(request.items or []),
            },
        )

        try:
            draft = await self.builder.build(
                request.customer_id, request.items
            )
            transaction_id = await self._write(draft)
        except TransactionError:
            raise
        except Exception as e:
            logger.error(
                "Failed to create transaction",
                extra={
                    "customer_id": request.customer_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise StorageFailure("Failed to create transaction") from e

        logger.info(
            "Transaction created",
            extra={
                "transaction_id": transaction_id,
                "customer_id": draft.customer_id,
                "item_count": len(draft.items),
                "total_amount": str(draft.total_amount),
            },
        )
        return transaction_id

    async def _write(self, draft: OrderDraft) -> int:
        async with self.transaction_repo.atomic() as writer:
            transaction_id = await writer.create_transaction_header(
                draft.customer_id,
                draft.total_amount,
                TransactionStatus.PENDING,
            )
            for item in draft.items:
                await writer.append_transaction_item(
                    transaction_id,
                    item.product_id,
                    item.quantity,
                    item.price_per_item,
                )
                await writer.update_product_stock(
                    item.product_id,
                    item.remaining_stock,
                    item.previous_stock,
                )
        return transaction_id


class GetTransactionsUseCase:
    """
    Use case for reading transactions with their line items.

    Lookups of a single transaction or of one customer's history treat an
    empty result as NotFound; the unfiltered listing returns an empty
    list instead.
    """

    def __init__(self, transaction_repo: TransactionRepository) -> None:
        self.transaction_repo = ensure_transaction_repository(
            transaction_repo
        )

    async def get_transaction(self, transaction_id: int) -> Transaction:
        rows = await self._fetch(transaction_id=transaction_id)
        if not rows:
            raise NotFound("transaction", transaction_id)
        return aggregate_rows(rows)[0]

    async def get_transactions_by_customer(
        self, customer_id: str
    ) -> List[Transaction]:
        rows = await self._fetch(customer_id=customer_id)
        if not rows:
            raise NotFound("transactions for customer", customer_id)
        return aggregate_rows(rows)

    async def list_transactions(self) -> List[Transaction]:
        return aggregate_rows(await self._fetch())

    async def _fetch(self, **criteria: Any) -> List[TransactionRow]:
        try:
            rows = await self.transaction_repo.fetch_rows(**criteria)
        except Exception as e:
            logger.error(
                "Failed to fetch transaction rows",
                extra={
                    "criteria": criteria,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise StorageFailure("Failed to fetch transactions") from e

        logger.debug(
            "Fetched transaction rows",
            extra={"criteria": criteria, "row_count": len(rows)},
        )
        return rows


class UpdateTransactionStatusUseCase:
    """
    Use case for overwriting a transaction's status.

    Any of the known statuses may be set from any other, including the
    current one.
    """

    def __init__(self, transaction_repo: TransactionRepository) -> None:
        self.transaction_repo = ensure_transaction_repository(
            transaction_repo
        )

    async def update_status(
        self, transaction_id: int, status: Optional[str]
    ) -> TransactionStatus:
        """
        Raises:
            InvalidRequest: If status is not a known value (storage is not
                touched)
            NotFound: If no transaction was updated
            StorageFailure: If the repository fails unexpectedly
        """
        if not isinstance(status, str) or status not in VALID_STATUSES:
            raise InvalidRequest(
                f"Invalid status; expected one of {sorted(VALID_STATUSES)}"
            )
        new_status = TransactionStatus(status)

        try:
            affected = await self.transaction_repo.update_status(
                transaction_id, new_status
            )
        except Exception as e:
            logger.error(
                "Failed to update transaction status",
                extra={
                    "transaction_id": transaction_id,
                    "status": new_status.value,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise StorageFailure("Failed to update transaction status") from e

        if affected == 0:
            raise NotFound("transaction", transaction_id)

        logger.info(
            "Transaction status updated",
            extra={
                "transaction_id": transaction_id,
                "status": new_status.value,
            },
        )
        return new_status


class DeleteTransactionUseCase:
    """Use case for deleting a transaction and its line items."""

    def __init__(self, transaction_repo: TransactionRepository) -> None:
        self.transaction_repo = ensure_transaction_repository(
            transaction_repo
        )

    async def delete_transaction(self, transaction_id: int) -> None:
        try:
            deleted = await self.transaction_repo.delete_transaction(
                transaction_id
            )
        except Exception as e:
            logger.error(
                "Failed to delete transaction",
                extra={
                    "transaction_id": transaction_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise StorageFailure("Failed to delete transaction") from e

        if deleted == 0:
            raise NotFound("transaction", transaction_id)

        logger.info(
            "Transaction deleted", extra={"transaction_id": transaction_id}
        )
