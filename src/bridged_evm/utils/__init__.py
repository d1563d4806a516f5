"""
Utility functions used by the engine.
"""
