import os
import click
from .. import config as config_module
from .. import manifest, vcs
from ..cli_logger import logger
from ..decorators import handle_exceptions
from ..errors import VcsError
from ..models import ProjectRepoFact
from ..recipe import RecipeTemplate, build_recipe_fields, render_recipes


def _report(outcome):
    for note in outcome.notes:
        logger.info(note)
    for warning in outcome.warnings:
        logger.warning(warning)


@click.command()
@click.pass_context
@click.option("-q", "quiet", is_flag=True, help="Silence all output.")
@click.option("-v", "verbose", count=True, help="Verbose mode (-v, -vv, etc.).")
@click.option("-t", "templates", multiple=True, type=click.Path(dir_okay=False),
              help="Template file to use, may be repeated. Defaults to the built-in bitbake template.")
@handle_exceptions
def bitbake(ctx, quiet, verbose, templates):
    """Generates a BitBake recipe for a given Cargo project."""
    logger.configure(quiet=quiet, verbose=verbose)

    project = manifest.load_project(ctx.obj["path"])
    package = project.package
    settings = config_module.build_settings(package.crate_root, project.bitbake_metadata)
    if settings.log_file:
        logger.configure(quiet=quiet, verbose=verbose, log_file=True)

    logger.debug(f"Generating recipe for {package.name} {package.version}")
    dependencies = manifest.load_lockfile(project.workspace_root)

    try:
        repo_fact = vcs.project_repo(package.crate_root, settings.git_prefix)
    except VcsError as e:
        logger.warning(str(e))
        repo_fact = ProjectRepoFact()

    outcome = build_recipe_fields(
        package,
        dependencies,
        repo_fact,
        git_prefix=settings.git_prefix,
        license_dirs=settings.license_dirs,
    )
    _report(outcome)

    template_paths = list(templates) or settings.templates
    loaded = [RecipeTemplate.from_file(path) for path in template_paths]
    render_recipes(outcome.value, loaded, out_dir=os.getcwd())
