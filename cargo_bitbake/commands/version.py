import click
from .. import __version__


@click.command()
def version():
    """Print the version of cargo-bitbake."""
    click.echo(f"cargo-bitbake version {__version__}")
