"""
Cryptographic primitives used by the engine.
"""
