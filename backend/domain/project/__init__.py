"""
Project Domain - Quotes and sales for clients.

This domain handles:
- Project records and their product lines
- Deposit and final payment derived from status changes
- Stock consumption of the products a sale delivers
"""
