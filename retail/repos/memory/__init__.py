"""
Memory repository implementations for the retail domain.

These implementations use Python dictionaries for storage and are ideal
for tests and local development where a database should be avoided. They
keep the same async interfaces as the PostgreSQL repositories.
"""

from .catalog import (
    MemoryCatalog,
    MemoryCustomerRepository,
    MemoryProductRepository,
)
from .transaction import MemoryTransactionRepository

__all__ = [
    "MemoryCatalog",
    "MemoryCustomerRepository",
    "MemoryProductRepository",
    "MemoryTransactionRepository",
]
