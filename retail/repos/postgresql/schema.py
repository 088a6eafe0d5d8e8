"""
PostgreSQL schema for the retail repositories.
"""

import logging

from asyncpg import Pool

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS customers (
    customer_id TEXT PRIMARY KEY,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS products (
    product_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    price NUMERIC(12, 2) NOT NULL CHECK (price >= 0),
    stock INTEGER NOT NULL CHECK (stock >= 0)
);

CREATE TABLE IF NOT EXISTS transactions (
    transaction_id BIGSERIAL PRIMARY KEY,
    customer_id TEXT NOT NULL REFERENCES customers (customer_id),
    total_amount NUMERIC(12, 2) NOT NULL,
    status TEXT NOT NULL
        CHECK (status IN ('pending', 'completed', 'cancelled')),
    transaction_date TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS transactions_customer_id_idx
    ON transactions (customer_id);

CREATE TABLE IF NOT EXISTS transaction_items (
    item_id BIGSERIAL PRIMARY KEY,
    transaction_id BIGINT NOT NULL
        REFERENCES transactions (transaction_id) ON DELETE CASCADE,
    product_id TEXT NOT NULL REFERENCES products (product_id),
    quantity INTEGER NOT NULL CHECK (quantity > 0),
    price_per_item NUMERIC(12, 2) NOT NULL
);

CREATE INDEX IF NOT EXISTS transaction_items_transaction_id_idx
    ON transaction_items (transaction_id);
"""


async def create_schema(pool: Pool) -> None:
    """Create all tables and indexes that do not exist yet."""
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_SQL)
    logger.info("PostgreSQL schema ensured")
