"""
Configuration for the catalog manager.
"""
