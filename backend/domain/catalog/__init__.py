"""
Catalog Domain - Products and their bills of materials.

This domain handles the product catalog:
- Raw materials (cost taken from the catalog)
- Sub-assemblies and finished goods (cost rolled up from components)
- Cycle-free component graph
"""
