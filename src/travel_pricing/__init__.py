"""
Travel Pricing Package

Quotes customer-facing prices for travel packages.
Resolves Supplier Cost → Markup Strategy → Currency → Destination Tax,
with country tiers, amount slabs and a flat default markup as fallback.
"""

__version__ = "1.0.0"
