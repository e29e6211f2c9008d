"""Core Application Layer: Orchestrates use cases and application logic.

Connects the domain layer with the infrastructure layer through interfaces.
Contains the crawler, the verse layout engine, the catalog service and the
command handler.
"""
