"""
Runtime validation utilities for ensuring architectural contracts and data
integrity.

This module provides functions to validate:

- Repository implementations against their defined Protocols using
  @runtime_checkable.
- Dictionary data against Pydantic domain models.

The goal is to catch configuration and data errors early at critical
application boundaries (use case construction, fixture loading).
"""

from typing import Any, Type, TypeVar
from pydantic import BaseModel, ValidationError
import logging

logger = logging.getLogger(__name__)

P = TypeVar("P")
M = TypeVar("M", bound=BaseModel)


class RepositoryValidationError(Exception):
    """Raised when repository contract validation fails"""

    pass


class DomainValidationError(Exception):
    """Raised when domain model validation fails"""

    pass


def validate_repository_protocol(
    repository: object, protocol: Type[P]
) -> None:
    """
    Check that a repository implementation satisfies a protocol.

    Raises:
        RepositoryValidationError: If a protocol method is missing

    Example:
        >>> from retail.repos.memory import MemoryCatalog
        >>> from retail.repos.memory import MemoryProductRepository
        >>> from retail.repositories import ProductRepository
        >>> repo = MemoryProductRepository(MemoryCatalog())
        >>> validate_repository_protocol(repo, ProductRepository)
    """
    if isinstance(repository, protocol):
        return

    logger.error(
        "Repository does not satisfy its protocol",
        extra={
            "repository_type": type(repository).__name__,
            "protocol_name": protocol.__name__,
        },
    )
    raise RepositoryValidationError(
        f"{type(repository).__name__} is not a {protocol.__name__}"
    )


def ensure_repository_protocol(repository: object, protocol: Type[P]) -> P:
    """Validate a repository and return it typed as the protocol."""
    validate_repository_protocol(repository, protocol)
    return repository  # type: ignore[return-value]


def validate_domain_model(data: Any, model_class: Type[M]) -> M:
    """
    Validate and convert dictionary data to a domain model using Pydantic.

    Args:
        data: Dictionary data to validate
        model_class: Pydantic model class to validate against

    Returns:
        Validated domain model instance

    Raises:
        DomainValidationError: If validation fails

    Example:
        >>> from retail.domain import Product
        >>> data = {"product_id": "P1", "name": "Mug", ...}
        >>> product = validate_domain_model(data, Product)
    """
    if not isinstance(data, dict):
        raise DomainValidationError(
            f"Expected a mapping for {model_class.__name__}, "
            f"got {type(data).__name__}"
        )

    try:
        return model_class(**data)
    except ValidationError as e:
        logger.error(
            "Domain model validation failed",
            extra={
                "model_class": model_class.__name__,
                "validation_errors": e.errors(),
                "input_data": data,
            },
        )
        raise DomainValidationError(
            f"Domain model validation failed for {model_class.__name__}: {e}"
        ) from e


# Convenience functions for common validation patterns
def ensure_customer_repository(repo: object) -> Any:
    """Ensure an object satisfies the CustomerRepository protocol"""
    from retail.repositories import CustomerRepository

    return ensure_repository_protocol(repo, CustomerRepository)  # type: ignore[type-abstract]


def ensure_product_repository(repo: object) -> Any:
    """Ensure an object satisfies the ProductRepository protocol"""
    from retail.repositories import ProductRepository

    return ensure_repository_protocol(repo, ProductRepository)  # type: ignore[type-abstract]


def ensure_transaction_repository(repo: object) -> Any:
    """Ensure an object satisfies the TransactionRepository protocol"""
    from retail.repositories import TransactionRepository

    return ensure_repository_protocol(repo, TransactionRepository)  # type: ignore[type-abstract]
