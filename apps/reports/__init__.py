# apps/reports/__init__.py

"""
Reports - board exports (CSV, Excel, PDF) and board statistics
"""
