"""
Data models: Rating scale, Review, Product.
"""
