"""
                Pizza Service

Multi-tenant food-ordering backend: diner accounts, franchises and
their stores, a global menu, and order placement fulfilled by an
external order factory.
"""

__version__ = "1.0.0"
