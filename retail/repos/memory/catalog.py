"""
Memory implementations of CustomerRepository and ProductRepository.

Both repositories are views over a shared MemoryCatalog so that stock
written by MemoryTransactionRepository is visible to later lookups.
"""

import logging
from typing import Dict, Iterable, Optional

from retail.domain import Customer, Product
from retail.repositories import CustomerRepository, ProductRepository

logger = logging.getLogger(__name__)


class MemoryCatalog:
    """In-memory customer registry and product catalog."""

    def __init__(
        self,
        customers: Iterable[Customer] = (),
        products: Iterable[Product] = (),
    ) -> None:
        self.customers: Dict[str, Customer] = {
            c.customer_id: c for c in customers
        }
        self.products: Dict[str, Product] = {
            p.product_id: p for p in products
        }
        logger.debug(
            "Initialized MemoryCatalog",
            extra={
                "customer_count": len(self.customers),
                "product_count": len(self.products),
            },
        )

    def add_customer(self, customer: Customer) -> None:
        self.customers[customer.customer_id] = customer

    def add_product(self, product: Product) -> None:
        self.products[product.product_id] = product


class MemoryCustomerRepository(CustomerRepository):
    def __init__(self, catalog: MemoryCatalog) -> None:
        self.catalog = catalog

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self.catalog.customers.get(customer_id)


class MemoryProductRepository(ProductRepository):
    def __init__(self, catalog: MemoryCatalog) -> None:
        self.catalog = catalog

    async def get_product(self, product_id: str) -> Optional[Product]:
        product = self.catalog.products.get(product_id)
        # Callers get a copy so they cannot change catalog stock directly
        return product.model_copy() if product is not None else None
