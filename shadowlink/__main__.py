"""Entry point for running shadowlink as a module."""

from .cli import cli

if __name__ == "__main__":
    cli()
