"""
Inventory Domain - stock movements and the stock ledger.

Every movement changes the referenced product's stock counter by its signed
quantity, so the counter always equals the signed sum of the movements.
"""
