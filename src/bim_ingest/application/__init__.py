"""Application Layer.

Use cases orchestrating adapters and repositories.
"""
