"""
Catalog Registry Module.

Single source of truth for products and their reviews.
Manages ratings, locking, localized queries and persistence.
"""
