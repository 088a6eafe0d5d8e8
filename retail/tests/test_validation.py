from decimal import Decimal

import pytest

from retail.domain import Product
from retail.repos.memory import (
    MemoryCatalog,
    MemoryCustomerRepository,
    MemoryProductRepository,
)
from retail.repositories import (
    CustomerRepository,
    ProductRepository,
    TransactionRepository,
)
from retail.validation import (
    DomainValidationError,
    RepositoryValidationError,
    ensure_customer_repository,
    ensure_transaction_repository,
    validate_domain_model,
    validate_repository_protocol,
)


def test_validate_repository_protocol_accepts_catalog_backed_repo() -> None:
    repo = MemoryProductRepository(MemoryCatalog())

    assert validate_repository_protocol(repo, ProductRepository) is None


def test_ensure_repository_returns_valid_implementation() -> None:
    repo = MemoryCustomerRepository(MemoryCatalog())

    assert ensure_customer_repository(repo) is repo
    assert isinstance(repo, CustomerRepository)


def test_ensure_repository_rejects_wrong_protocol() -> None:
    repo = MemoryCustomerRepository(MemoryCatalog())

    with pytest.raises(RepositoryValidationError) as exc_info:
        ensure_transaction_repository(repo)

    assert TransactionRepository.__name__ in str(exc_info.value)


def test_validate_domain_model_builds_model() -> None:
    product = validate_domain_model(
        {"product_id": "P1", "name": "Mug", "price": "9.99", "stock": 3},
        Product,
    )

    assert product.price == Decimal("9.99")


@pytest.mark.parametrize(
    "data",
    [
        {"product_id": "P1", "name": "Mug", "price": "-1", "stock": 3},
        {"product_id": "P1", "name": "Mug", "price": "1", "stock": -3},
        {"product_id": "P1"},
        ["not", "a", "mapping"],
    ],
)
def test_validate_domain_model_rejects_bad_data(data) -> None:
    with pytest.raises(DomainValidationError):
        validate_domain_model(data, Product)
