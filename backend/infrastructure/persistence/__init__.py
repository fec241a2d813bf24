"""
Persistence layer: Django ORM storage for the ledger collections.
"""
