"""Domain Layer: models, failure taxonomy, events and ports.

Nothing in here performs I/O.
"""
