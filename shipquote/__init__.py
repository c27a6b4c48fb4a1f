"""Shipping rate engine for multi-store storefront carts."""

__version__ = "1.0.0"
