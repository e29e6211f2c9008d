"""Main entry point when executing ganjoorcli as a package.

This allows running the package using python -m ganjoorcli.
"""

from ganjoorcli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
