"""Main entry point for the threadbox CLI (``python -m threadbox``)."""

from threadbox.cli import cli

if __name__ == "__main__":
    cli()
