"""
Application Services.

Use-case layer over the domain rules: the record store facade, CSV and
workbook mapping, and the dashboard query.
"""
