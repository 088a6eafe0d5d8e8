"""
PostgreSQL implementation of TransactionRepository.
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, List, Optional

from asyncpg import Connection, Pool

from retail.domain import TransactionRow, TransactionStatus
from retail.errors import StockConflict
from retail.repositories import TransactionRepository, TransactionWriter

logger = logging.getLogger(__name__)

# transaction_id is a BIGSERIAL; values outside it cannot name a row
BIGINT_MAX = 2**63 - 1


def _affected_rows(status: str) -> int:
    """Parse the row count out of a command tag such as 'UPDATE 1'."""
    return int(status.rsplit(" ", 1)[-1])


def _is_storable_id(transaction_id: int) -> bool:
    return 1 <= transaction_id <= BIGINT_MAX


class PostgreSQLTransactionWriter(TransactionWriter):
    """Writer bound to a connection with an open database transaction."""

    def __init__(self, conn: Connection):
        self.conn = conn

    async def create_transaction_header(
        self,
        customer_id: str,
        total_amount: Decimal,
        status: TransactionStatus,
    ) -> int:
        transaction_id = await self.conn.fetchval(
            """
            INSERT INTO transactions (customer_id, total_amount, status)
            VALUES ($1, $2, $3)
            RETURNING transaction_id
            """,
            customer_id,
            total_amount,
            status.value,
        )
        return int(transaction_id)

    async def append_transaction_item(
        self,
        transaction_id: int,
        product_id: str,
        quantity: int,
        price_per_item: Decimal,
    ) -> None:
        await self.conn.execute(
            """
            INSERT INTO transaction_items
                (transaction_id, product_id, quantity, price_per_item)
            VALUES ($1, $2, $3, $4)
            """,
            transaction_id,
            product_id,
            quantity,
            price_per_item,
        )

    async def update_product_stock(
        self, product_id: str, new_stock: int, expected_stock: int
    ) -> None:
        status = await self.conn.execute(
            """
            UPDATE products
            SET stock = $2
            WHERE product_id = $1 AND stock = $3
            """,
            product_id,
            new_stock,
            expected_stock,
        )
        if _affected_rows(status) == 0:
            logger.warning(
                "Stock changed since validation",
                extra={
                    "product_id": product_id,
                    "expected_stock": expected_stock,
                },
            )
            raise StockConflict(product_id)


class PostgreSQLTransactionRepository(TransactionRepository):
    """
    PostgreSQL implementation of TransactionRepository.

    Line items are removed by the ON DELETE CASCADE on transaction_items.
    """

    def __init__(self, pool: Pool):
        """
        Initialize with an asyncpg connection pool.

        Args:
            pool: asyncpg connection pool for database operations
        """
        self.pool = pool
        logger.debug("Initialized PostgreSQLTransactionRepository")

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[TransactionWriter]:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield PostgreSQLTransactionWriter(conn)

    async def fetch_rows(
        self,
        transaction_id: Optional[int] = None,
        customer_id: Optional[str] = None,
    ) -> List[TransactionRow]:
        if transaction_id is not None and not _is_storable_id(transaction_id):
            return []

        query = """
            SELECT
                t.transaction_id, t.customer_id, t.total_amount, t.status,
                t.transaction_date,
                ti.item_id, ti.product_id, p.name AS product_name,
                ti.quantity, ti.price_per_item
            FROM transactions t
            LEFT JOIN transaction_items ti
                ON ti.transaction_id = t.transaction_id
            LEFT JOIN products p ON p.product_id = ti.product_id
            WHERE ($1::bigint IS NULL OR t.transaction_id = $1)
              AND ($2::text IS NULL OR t.customer_id = $2)
            ORDER BY t.transaction_id, ti.item_id
        """
        async with self.pool.acquire() as conn:
            records = await conn.fetch(query, transaction_id, customer_id)

        logger.debug(
            f"Retrieved {len(records)} transaction rows",
            extra={
                "transaction_id": transaction_id,
                "customer_id": customer_id,
            },
        )
        return [TransactionRow(**dict(record)) for record in records]

    async def update_status(
        self, transaction_id: int, status: TransactionStatus
    ) -> int:
        if not _is_storable_id(transaction_id):
            return 0
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                "UPDATE transactions SET status = $2 WHERE transaction_id = $1",
                transaction_id,
                status.value,
            )
        return _affected_rows(result)

    async def delete_transaction(self, transaction_id: int) -> int:
        if not _is_storable_id(transaction_id):
            return 0
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM transactions WHERE transaction_id = $1",
                transaction_id,
            )
        return _affected_rows(result)
