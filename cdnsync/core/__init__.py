"""
Core utilities shared by providers, cache and sync.
"""
