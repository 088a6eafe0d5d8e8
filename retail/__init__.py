"""
Retail transaction processing: order creation against a product catalog,
transaction history queries and status management.
"""
