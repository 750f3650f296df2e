"""
Product catalog manager.

Products, reviews and derived ratings with flat-file persistence
and localized reporting.
"""
