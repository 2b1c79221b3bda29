"""Infrastructure Layer.

Format adapters, IFC engine, persistence and object storage.
"""
