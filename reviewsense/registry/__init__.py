"""
Product Registry Module.

Tracked products and their persistence.
"""
