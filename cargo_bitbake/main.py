import click
from .commands import bitbake, version


@click.group()
@click.option("--path", "-p", default=".", help="Path to the Cargo project directory.")
@click.pass_context
def cli(ctx, path):
    """Generates BitBake recipes for Cargo projects."""
    ctx.obj = {"path": path}

cli.add_command(bitbake)
cli.add_command(version)


if __name__ == '__main__':
    cli()
