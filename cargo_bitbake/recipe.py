"""Assemble recipe fields and render them through recipe templates."""

import os
import re
from types import MappingProxyType

from . import __version__
from .cli_logger import logger
from .errors import TemplateError, MissingFieldError
from .git import GitPrefix
from .license import DEFAULT_LICENSE_DIRS, resolve_license
from .models import Outcome
from .revision import git_srcpv
from .sources import classify

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")
BUILTIN_TEMPLATE = os.path.join(TEMPLATES_DIR, "bitbake.template")

FIELD_NAMES = (
    "name",
    "version",
    "summary",
    "homepage",
    "license",
    "lic_files",
    "src_uri",
    "src_uri_extras",
    "project_rel_dir",
    "project_src_uri",
    "project_src_rev",
    "git_srcpv",
    "cargo_bitbake_ver",
)

# {field}, but not BitBake's own ${VAR} expansions
PLACEHOLDER = re.compile(r"(?<!\$)\{([A-Za-z_][A-Za-z0-9_]*)\}")


class RecipeTemplate:
    """A recipe template with ``{field}`` placeholders.

    Rendering is all-or-nothing: a placeholder without a bound field
    raises MissingFieldError and no text is produced.
    """

    def __init__(self, text, name, extension):
        self.text = text
        self.name = name
        self.extension = extension

    @classmethod
    def from_file(cls, path):
        """Load ``<stem>.<ext>.<suffix>``; the rendered recipe gets ``.<ext>``."""
        stem, _ = os.path.splitext(os.path.basename(path))
        _, extension = os.path.splitext(stem)
        if not extension:
            raise TemplateError(
                f"Cannot derive the recipe extension from template '{path}', "
                "name it like 'recipe.bb.template'"
            )
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateError(f"Unable to read template '{path}': {e}") from e
        return cls(text, name=path, extension=extension[1:])

    @classmethod
    def builtin(cls):
        with open(BUILTIN_TEMPLATE, "r", encoding="utf-8") as f:
            return cls(f.read(), name="bitbake.template", extension="bb")

    def placeholders(self):
        return set(PLACEHOLDER.findall(self.text))

    def render(self, fields):
        missing = self.placeholders() - set(fields)
        if missing:
            raise MissingFieldError(self.name, missing)
        return PLACEHOLDER.sub(lambda match: str(fields[match.group(1)]), self.text)


def recipe_filename(fields, template):
    return f"{fields['name']}_{fields['version']}.{template.extension}"


def _summary(package, outcome):
    if package.description and package.description.strip():
        return package.description.strip()
    outcome.notes.append("No package.description set in your Cargo.toml, using package.name")
    return package.name


def _homepage(package, outcome):
    if package.homepage and package.homepage.strip():
        return package.homepage.strip()
    outcome.notes.append("No package.homepage set in your Cargo.toml, trying package.repository")
    if package.repository and package.repository.strip():
        return package.repository.strip()
    outcome.notes.append("No package.repository set in your Cargo.toml, leaving HOMEPAGE empty")
    return ""


def build_recipe_fields(package, dependencies, repo_fact, git_prefix=GitPrefix.DEFAULT,
                        license_dirs=DEFAULT_LICENSE_DIRS):
    """Compute every recipe field for ``package``.

    Args:
        package: PackageMetadata of the root package.
        dependencies: ResolvedDependency records from the lockfile.
        repo_fact: ProjectRepoFact of the project's checkout.
        git_prefix: Scheme for git dependency URIs.
        license_dirs: Extra directories searched for license texts.

    Returns:
        Outcome holding a read-only mapping of field name to text.

    Raises:
        ClassificationError: a dependency has malformed source data.
        RevisionError: the project revision is too short to pin.
    """
    outcome = Outcome(value=None)

    if "_" in package.name:
        outcome.notes.append("Package name contains an underscore")

    directives = classify(dependencies, package.name, git_prefix)
    license_info = outcome.absorb(resolve_license(
        package.license,
        package.license_file,
        package.crate_root,
        package.rel_dir,
        license_dirs,
    ))

    fields = {
        "name": package.name,
        "version": package.version,
        "summary": _summary(package, outcome),
        "homepage": _homepage(package, outcome),
        "license": license_info.license,
        "lic_files": "".join(f"    {entry.directive()} \\\n" for entry in license_info.files),
        "src_uri": "".join(f"    {uri} \\\n" for uri in directives.src_uris),
        "src_uri_extras": "\n".join(directives.extras),
        "project_rel_dir": package.rel_dir,
        "project_src_uri": repo_fact.uri,
        "project_src_rev": repo_fact.rev,
        "git_srcpv": git_srcpv(repo_fact),
        "cargo_bitbake_ver": __version__,
    }
    outcome.value = MappingProxyType({name: fields[name] for name in FIELD_NAMES})
    return outcome


def render_recipes(fields, templates=None, out_dir="."):
    """Render ``fields`` through each template and write the recipes.

    Every template is rendered before anything is written, so a bad
    template leaves no recipe behind. Existing recipes are overwritten.

    Returns:
        The list of written paths.
    """
    if not templates:
        templates = [RecipeTemplate.builtin()]

    rendered = []
    for template in templates:
        text = template.render(fields)
        rendered.append((os.path.join(out_dir, recipe_filename(fields, template)), text))

    written = []
    for recipe_path, text in rendered:
        logger.trace(text)
        tmp_path = f"{recipe_path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, recipe_path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise OSError(f"Unable to write bitbake recipe {recipe_path}: {e}") from e
        logger.success(f"Wrote: {recipe_path}")
        written.append(recipe_path)
    return written
