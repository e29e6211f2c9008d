"""Bindings for the Ganjoor REST routes."""
