from decimal import Decimal

import pytest

from retail.domain import Customer, Product
from retail.repos.memory import (
    MemoryCatalog,
    MemoryCustomerRepository,
    MemoryProductRepository,
    MemoryTransactionRepository,
)
from retail.usecase import CreateTransactionUseCase


@pytest.fixture
def catalog() -> MemoryCatalog:
    """Customer C1 plus products P1 (10.00, stock 5) and P2 (3.00, stock 1)."""
    return MemoryCatalog(
        customers=[Customer(customer_id="C1"), Customer(customer_id="C2")],
        products=[
            Product(
                product_id="P1", name="Mug", price=Decimal("10"), stock=5
            ),
            Product(
                product_id="P2", name="Spoon", price=Decimal("3"), stock=1
            ),
        ],
    )


@pytest.fixture
def customer_repo(catalog: MemoryCatalog) -> MemoryCustomerRepository:
    return MemoryCustomerRepository(catalog)


@pytest.fixture
def product_repo(catalog: MemoryCatalog) -> MemoryProductRepository:
    return MemoryProductRepository(catalog)


@pytest.fixture
def transaction_repo(catalog: MemoryCatalog) -> MemoryTransactionRepository:
    return MemoryTransactionRepository(catalog)


@pytest.fixture
def create_use_case(
    customer_repo: MemoryCustomerRepository,
    product_repo: MemoryProductRepository,
    transaction_repo: MemoryTransactionRepository,
) -> CreateTransactionUseCase:
    return CreateTransactionUseCase(
        customer_repo, product_repo, transaction_repo
    )
