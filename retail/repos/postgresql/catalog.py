"""
PostgreSQL implementations of CustomerRepository and ProductRepository.
"""

import logging
from typing import Optional

from asyncpg import Pool

from retail.domain import Customer, Product
from retail.repositories import CustomerRepository, ProductRepository

logger = logging.getLogger(__name__)


class PostgreSQLCustomerRepository(CustomerRepository):
    """
    PostgreSQL implementation of CustomerRepository.
    """

    def __init__(self, pool: Pool):
        """
        Initialize with an asyncpg connection pool.

        Args:
            pool: asyncpg connection pool for database operations
        """
        self.pool = pool
        logger.debug("Initialized PostgreSQLCustomerRepository")

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT customer_id FROM customers WHERE customer_id = $1",
                customer_id,
            )
        if row is None:
            return None
        return Customer(customer_id=row["customer_id"])

    async def save_customer(self, customer: Customer) -> None:
        """Insert a customer if it is not registered yet."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO customers (customer_id) VALUES ($1)
                ON CONFLICT (customer_id) DO NOTHING
                """,
                customer.customer_id,
            )


class PostgreSQLProductRepository(ProductRepository):
    """
    PostgreSQL implementation of ProductRepository.
    """

    def __init__(self, pool: Pool):
        self.pool = pool
        logger.debug("Initialized PostgreSQLProductRepository")

    async def get_product(self, product_id: str) -> Optional[Product]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT product_id, name, price, stock
                FROM products
                WHERE product_id = $1
                """,
                product_id,
            )
        if row is None:
            return None
        return Product(
            product_id=row["product_id"],
            name=row["name"],
            price=row["price"],
            stock=row["stock"],
        )

    async def save_product(self, product: Product) -> None:
        """Insert a product, or overwrite name, price and stock."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO products (product_id, name, price, stock)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (product_id)
                DO UPDATE SET
                    name = EXCLUDED.name,
                    price = EXCLUDED.price,
                    stock = EXCLUDED.stock
                """,
                product.product_id,
                product.name,
                product.price,
                product.stock,
            )
        logger.info(
            "Saved product to PostgreSQL",
            extra={"product_id": product.product_id, "stock": product.stock},
        )
