"""IronREST CLI entry point."""

import click


@click.group()
def cli():
    """IronREST: REST access to document collections."""
    pass


# Register subcommands
from ironrest.cli.bindings_cmd import bindings  # noqa: E402
from ironrest.cli.serve_cmd import serve  # noqa: E402

cli.add_command(bindings)
cli.add_command(serve)
