"""
Tests for OrderBuilder: request validation, fail-fast item evaluation and
pricing. The builder must never write, so the repositories here are
read-only mocks.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from retail.domain import Customer, TransactionItemRequest
from retail.errors import InsufficientStock, InvalidRequest, NotFound
from retail.repositories import CustomerRepository, ProductRepository
from retail.tests.factories import ProductFactory
from retail.usecase import OrderBuilder


def make_builder(products, customer=Customer(customer_id="C1")):
    """Builder over mocks; products maps product_id to Product."""
    customer_repo = MagicMock(spec=CustomerRepository)
    customer_repo.get_customer = AsyncMock(return_value=customer)
    product_repo = MagicMock(spec=ProductRepository)
    product_repo.get_product = AsyncMock(
        side_effect=lambda product_id: products.get(product_id)
    )
    return OrderBuilder(customer_repo, product_repo), customer_repo, product_repo


def item(product_id, quantity):
    return TransactionItemRequest(product_id=product_id, quantity=quantity)


@pytest.mark.asyncio
async def test_build_computes_total_and_remaining_stock() -> None:
    products = {
        "P1": ProductFactory(product_id="P1", price=Decimal("10"), stock=5),
        "P2": ProductFactory(product_id="P2", price=Decimal("2.50"), stock=4),
    }
    builder, _, _ = make_builder(products)

    draft = await builder.build("C1", [item("P1", 2), item("P2", 4)])

    assert draft.customer_id == "C1"
    assert draft.total_amount == Decimal("30.00")
    assert [i.product_id for i in draft.items] == ["P1", "P2"]
    assert draft.items[0].price_per_item == Decimal("10")
    assert draft.items[0].previous_stock == 5
    assert draft.items[0].remaining_stock == 3
    assert draft.items[1].remaining_stock == 0
    assert draft.total_amount == sum(i.subtotal for i in draft.items)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "customer_id, items",
    [
        (None, [item("P1", 1)]),
        ("", [item("P1", 1)]),
        ("   ", [item("P1", 1)]),
        ("C1", None),
        ("C1", []),
        ("C1", "P1"),
    ],
)
async def test_missing_customer_or_items_is_invalid_before_lookup(
    customer_id, items
) -> None:
    builder, customer_repo, product_repo = make_builder({})

    with pytest.raises(InvalidRequest):
        await builder.build(customer_id, items)

    customer_repo.get_customer.assert_not_awaited()
    product_repo.get_product.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [None, 0, -1, 1.5, "2", True])
async def test_bad_quantity_is_invalid_before_its_own_lookup(
    quantity,
) -> None:
    builder, _, product_repo = make_builder(
        {"P1": ProductFactory(product_id="P1", stock=5)}
    )

    with pytest.raises(InvalidRequest) as exc_info:
        await builder.build("C1", [item("P1", 1), item("P1", quantity)])

    assert "Item 1" in str(exc_info.value)
    assert product_repo.get_product.await_args_list == [call("P1")]


@pytest.mark.asyncio
async def test_unknown_product_wins_over_later_bad_quantity() -> None:
    builder, _, product_repo = make_builder(
        {"P1": ProductFactory(product_id="P1")}
    )

    with pytest.raises(NotFound) as exc_info:
        await builder.build("C1", [item("missing", 1), item("P1", 0)])

    assert exc_info.value.identifier == "missing"
    assert product_repo.get_product.await_args_list == [call("missing")]


@pytest.mark.asyncio
async def test_unknown_customer_wins_over_bad_quantity() -> None:
    builder, _, product_repo = make_builder(
        {"P1": ProductFactory(product_id="P1")}, customer=None
    )

    with pytest.raises(NotFound) as exc_info:
        await builder.build("ghost", [item("P1", 0)])

    assert exc_info.value.resource == "customer"
    product_repo.get_product.assert_not_awaited()


@pytest.mark.asyncio
async def test_item_without_product_id_is_invalid() -> None:
    builder, _, _ = make_builder({})

    with pytest.raises(InvalidRequest):
        await builder.build(
            "C1", [TransactionItemRequest(product_id=None, quantity=1)]
        )


@pytest.mark.asyncio
async def test_unknown_customer_is_not_found() -> None:
    builder, _, product_repo = make_builder(
        {"P1": ProductFactory(product_id="P1")}, customer=None
    )

    with pytest.raises(NotFound) as exc_info:
        await builder.build("ghost", [item("P1", 1)])

    assert exc_info.value.resource == "customer"
    assert exc_info.value.identifier == "ghost"
    product_repo.get_product.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_product_stops_evaluation() -> None:
    products = {
        "P1": ProductFactory(product_id="P1"),
        "P3": ProductFactory(product_id="P3"),
    }
    builder, _, product_repo = make_builder(products)

    with pytest.raises(NotFound) as exc_info:
        await builder.build(
            "C1", [item("P1", 1), item("missing", 1), item("P3", 1)]
        )

    assert exc_info.value.resource == "product"
    assert exc_info.value.identifier == "missing"
    assert product_repo.get_product.await_args_list == [
        call("P1"),
        call("missing"),
    ]


@pytest.mark.asyncio
async def test_first_understocked_item_wins() -> None:
    products = {
        "P1": ProductFactory(product_id="P1", stock=5),
        "P2": ProductFactory(product_id="P2", name="Spoon", stock=1),
        "P3": ProductFactory(product_id="P3", name="Fork", stock=0),
    }
    builder, _, product_repo = make_builder(products)

    with pytest.raises(InsufficientStock) as exc_info:
        await builder.build(
            "C1", [item("P1", 2), item("P2", 2), item("P3", 1)]
        )

    assert exc_info.value.product_name == "Spoon"
    assert exc_info.value.available == 1
    assert "Spoon" in str(exc_info.value)
    assert product_repo.get_product.await_count == 2


@pytest.mark.asyncio
async def test_repeated_product_draws_on_remaining_stock() -> None:
    products = {"P1": ProductFactory(product_id="P1", name="Mug", stock=5)}
    builder, _, _ = make_builder(products)

    draft = await builder.build("C1", [item("P1", 2), item("P1", 3)])

    assert [(i.previous_stock, i.remaining_stock) for i in draft.items] == [
        (5, 3),
        (3, 0),
    ]

    with pytest.raises(InsufficientStock) as exc_info:
        await builder.build("C1", [item("P1", 4), item("P1", 2)])
    assert exc_info.value.available == 1


@pytest.mark.asyncio
async def test_zero_priced_product_is_accepted() -> None:
    products = {"P1": ProductFactory(product_id="P1", price=Decimal("0"))}
    builder, _, _ = make_builder(products)

    draft = await builder.build("C1", [item("P1", 3)])

    assert draft.total_amount == Decimal("0")
