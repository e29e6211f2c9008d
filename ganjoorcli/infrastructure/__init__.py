"""Infrastructure Layer: adapters implementing the domain ports.

HTTP transport, resilience, session storage, endpoint bindings,
configuration, logging and console display.
"""
