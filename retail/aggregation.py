"""
Reassembly of flat header/line-item rows into nested transactions.

Storage returns one row per line item, each carrying a copy of its
transaction's header fields. aggregate_rows() folds those rows back into
Transaction objects.
"""

from typing import Dict, Iterable, List

from retail.domain import Transaction, TransactionLineItem, TransactionRow


def aggregate_rows(rows: Iterable[TransactionRow]) -> List[Transaction]:
    """Group rows by transaction id.

    Transactions are returned in the order their first row appears in
    ``rows``; items keep row order within their transaction. Header
    fields are taken from the first row of each transaction. A row with
    no item_id (a header without line items) adds no item.

    The function does not mutate its input, so calling it twice on the
    same rows yields equal results.
    """
    transactions: Dict[int, Transaction] = {}

    for row in rows:
        transaction = transactions.get(row.transaction_id)
        if transaction is None:
            transaction = Transaction(
                transaction_id=row.transaction_id,
                customer_id=row.customer_id,
                total_amount=row.total_amount,
                status=row.status,
                transaction_date=row.transaction_date,
                items=[],
            )
            transactions[row.transaction_id] = transaction

        if row.item_id is None:
            continue

        transaction.items.append(
            TransactionLineItem(
                item_id=row.item_id,
                product_id=row.product_id,
                product_name=row.product_name,
                quantity=row.quantity,
                price_per_item=row.price_per_item,
            )
        )

    return list(transactions.values())
