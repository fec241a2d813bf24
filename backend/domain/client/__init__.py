"""
Client Domain - people and organizations the business works for.

Individuals are identified by a personal tax id, organizations by a company
tax id. Rollup fields are informational and maintained outside the core.
"""
