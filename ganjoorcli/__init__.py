"""ganjoorcli: a read-only command-line browser for the Ganjoor poetry archive."""

__version__ = "0.1.0"
