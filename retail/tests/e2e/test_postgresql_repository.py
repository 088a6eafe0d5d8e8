"""
End-to-end tests that validate the PostgreSQL repositories against the
TransactionRepository contract. These need a disposable database named by
TEST_DATABASE_URL; every test truncates all retail tables.
"""

import os
from typing import AsyncIterator, Tuple

import asyncpg
import pytest
import pytest_asyncio

from retail.repos.postgresql import (
    PostgreSQLCustomerRepository,
    PostgreSQLProductRepository,
    PostgreSQLTransactionRepository,
    create_schema,
)
from retail.repositories import ProductRepository, TransactionRepository
from retail.tests.test_repository_contracts import (
    TransactionRepositoryContractTestMixin,
    seeded_customers,
    seeded_products,
)

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


@pytest.mark.e2e
@pytest.mark.skipif(
    TEST_DATABASE_URL is None, reason="TEST_DATABASE_URL is not set"
)
class TestPostgreSQLTransactionRepositoryContract(
    TransactionRepositoryContractTestMixin
):
    @pytest_asyncio.fixture(autouse=True)
    async def pool(self) -> AsyncIterator[asyncpg.Pool]:
        pool = await asyncpg.create_pool(TEST_DATABASE_URL)
        await create_schema(pool)
        async with pool.acquire() as conn:
            await conn.execute(
                "TRUNCATE transaction_items, transactions, products, "
                "customers RESTART IDENTITY CASCADE"
            )
        customers = PostgreSQLCustomerRepository(pool)
        products = PostgreSQLProductRepository(pool)
        for customer in seeded_customers():
            await customers.save_customer(customer)
        for product in seeded_products():
            await products.save_product(product)

        self._pool = pool
        yield pool
        await pool.close()

    async def create_repositories(
        self,
    ) -> Tuple[TransactionRepository, ProductRepository]:
        return (
            PostgreSQLTransactionRepository(self._pool),
            PostgreSQLProductRepository(self._pool),
        )

    @pytest.mark.asyncio
    async def test_get_customer(self) -> None:
        repo = PostgreSQLCustomerRepository(self._pool)

        assert (await repo.get_customer("C1")).customer_id == "C1"
        assert await repo.get_customer("nobody") is None
