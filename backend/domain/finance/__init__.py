"""
Finance Domain - the transaction ledger (inflows and outflows).
"""
