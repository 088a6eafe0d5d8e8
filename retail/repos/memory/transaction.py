"""
Memory implementation of TransactionRepository.

Headers and line items are kept in dictionaries keyed by their generated
integer ids. A unit of work opened with atomic() holds a lock for its
whole duration and snapshots every dictionary it may touch, restoring the
snapshot if the block raises.
"""

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional

from retail.domain import Product, TransactionRow, TransactionStatus
from retail.errors import StockConflict
from retail.repositories import TransactionRepository, TransactionWriter

from .catalog import MemoryCatalog

logger = logging.getLogger(__name__)


@dataclass
class _Header:
    transaction_id: int
    customer_id: str
    total_amount: Decimal
    status: TransactionStatus
    transaction_date: datetime


@dataclass
class _Item:
    item_id: int
    transaction_id: int
    product_id: str
    quantity: int
    price_per_item: Decimal


class MemoryTransactionWriter(TransactionWriter):
    """Writer bound to one MemoryTransactionRepository unit of work."""

    def __init__(self, repo: "MemoryTransactionRepository") -> None:
        self.repo = repo

    async def create_transaction_header(
        self,
        customer_id: str,
        total_amount: Decimal,
        status: TransactionStatus,
    ) -> int:
        self.repo.last_transaction_id += 1
        transaction_id = self.repo.last_transaction_id
        self.repo.headers[transaction_id] = _Header(
            transaction_id=transaction_id,
            customer_id=customer_id,
            total_amount=total_amount,
            status=status,
            transaction_date=datetime.now(timezone.utc),
        )
        return transaction_id

    async def append_transaction_item(
        self,
        transaction_id: int,
        product_id: str,
        quantity: int,
        price_per_item: Decimal,
    ) -> None:
        if transaction_id not in self.repo.headers:
            raise KeyError(f"Transaction not found: {transaction_id}")
        self.repo.last_item_id += 1
        self.repo.items[self.repo.last_item_id] = _Item(
            item_id=self.repo.last_item_id,
            transaction_id=transaction_id,
            product_id=product_id,
            quantity=quantity,
            price_per_item=price_per_item,
        )

    async def update_product_stock(
        self, product_id: str, new_stock: int, expected_stock: int
    ) -> None:
        product = self.repo.catalog.products.get(product_id)
        if product is None or product.stock != expected_stock:
            raise StockConflict(product_id)
        self.repo.catalog.products[product_id] = product.model_copy(
            update={"stock": new_stock}
        )


class MemoryTransactionRepository(TransactionRepository):
    """
    Memory implementation of TransactionRepository using Python
    dictionaries.

    Product names in fetched rows are looked up in the catalog at read
    time; an item whose product has since disappeared gets a None name.
    """

    def __init__(self, catalog: MemoryCatalog) -> None:
        self.catalog = catalog
        self.headers: Dict[int, _Header] = {}
        self.items: Dict[int, _Item] = {}
        self.last_transaction_id = 0
        self.last_item_id = 0
        self._lock = asyncio.Lock()
        logger.debug("Initializing MemoryTransactionRepository")

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[TransactionWriter]:
        async with self._lock:
            snapshot = self._snapshot()
            try:
                yield MemoryTransactionWriter(self)
            except BaseException:
                self._restore(snapshot)
                logger.debug("Rolled back memory unit of work")
                raise

    def _snapshot(self) -> tuple:
        return (
            copy.deepcopy(self.headers),
            copy.deepcopy(self.items),
            self.last_transaction_id,
            self.last_item_id,
            dict(self.catalog.products),
        )

    def _restore(self, snapshot: tuple) -> None:
        (
            self.headers,
            self.items,
            self.last_transaction_id,
            self.last_item_id,
            products,
        ) = snapshot
        self.catalog.products.clear()
        self.catalog.products.update(products)

    async def fetch_rows(
        self,
        transaction_id: Optional[int] = None,
        customer_id: Optional[str] = None,
    ) -> List[TransactionRow]:
        headers = [
            h
            for h in sorted(
                self.headers.values(), key=lambda h: h.transaction_id
            )
            if (transaction_id is None or h.transaction_id == transaction_id)
            and (customer_id is None or h.customer_id == customer_id)
        ]

        rows: List[TransactionRow] = []
        for header in headers:
            items = sorted(
                (
                    i
                    for i in self.items.values()
                    if i.transaction_id == header.transaction_id
                ),
                key=lambda i: i.item_id,
            )
            if not items:
                rows.append(self._row(header, None))
            rows.extend(self._row(header, item) for item in items)
        return rows

    def _row(self, header: _Header, item: Optional[_Item]) -> TransactionRow:
        row = TransactionRow(
            transaction_id=header.transaction_id,
            customer_id=header.customer_id,
            total_amount=header.total_amount,
            status=header.status,
            transaction_date=header.transaction_date,
        )
        if item is None:
            return row
        product: Optional[Product] = self.catalog.products.get(
            item.product_id
        )
        return row.model_copy(
            update={
                "item_id": item.item_id,
                "product_id": item.product_id,
                "product_name": product.name if product else None,
                "quantity": item.quantity,
                "price_per_item": item.price_per_item,
            }
        )

    async def update_status(
        self, transaction_id: int, status: TransactionStatus
    ) -> int:
        header = self.headers.get(transaction_id)
        if header is None:
            return 0
        header.status = status
        return 1

    async def delete_transaction(self, transaction_id: int) -> int:
        if self.headers.pop(transaction_id, None) is None:
            return 0
        self.items = {
            item_id: item
            for item_id, item in self.items.items()
            if item.transaction_id != transaction_id
        }
        return 1
