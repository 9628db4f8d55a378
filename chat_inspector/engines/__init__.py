"""
Analytic engines. Pure functions over already-loaded data; no database access.
"""
