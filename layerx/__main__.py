"""Main entry point when executing layerx as a package.

This allows running the package using python -m layerx.
"""

from layerx.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
