"""
PostgreSQL repository implementations backed by an asyncpg pool.
"""

from .catalog import PostgreSQLCustomerRepository, PostgreSQLProductRepository
from .schema import create_schema
from .transaction import PostgreSQLTransactionRepository

__all__ = [
    "PostgreSQLCustomerRepository",
    "PostgreSQLProductRepository",
    "PostgreSQLTransactionRepository",
    "create_schema",
]
