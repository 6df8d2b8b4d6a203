"""Read Cargo.toml and Cargo.lock into the models used for recipe generation.

Nothing is resolved here: the dependency graph is taken as recorded in
Cargo.lock, which ``cargo generate-lockfile`` or any cargo build creates.
"""

import os
from dataclasses import dataclass, field
from typing import List
from urllib.parse import parse_qsl

import toml

from .cli_logger import logger
from .errors import ManifestError
from .models import (
    Branch,
    DefaultBranch,
    GitSource,
    OtherSource,
    PackageMetadata,
    PathSource,
    RegistrySource,
    ResolvedDependency,
    Rev,
    Tag,
)

MANIFEST_FILE = "Cargo.toml"
LOCK_FILE = "Cargo.lock"
REGISTRY_PREFIXES = ("registry+", "sparse+")
METADATA_KEYS = ("description", "homepage", "repository", "license")
# cargo treats an omitted package.version as 0.0.0
DEFAULT_VERSION = "0.0.0"


@dataclass
class CargoProject:
    package: PackageMetadata
    workspace_root: str
    bitbake_metadata: dict = field(default_factory=dict)


def _read_toml(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (toml.TomlDecodeError, UnicodeDecodeError) as e:
        raise ManifestError(f"Error decoding {path}: {e}") from e
    except IOError as e:
        raise ManifestError(f"Error reading {path}: {e}") from e


def find_manifest(start="."):
    """Return the path of the nearest Cargo.toml at or above ``start``."""
    directory = os.path.abspath(start)
    while True:
        candidate = os.path.join(directory, MANIFEST_FILE)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(directory)
        if parent == directory:
            raise ManifestError(f"Could not find {MANIFEST_FILE} in {os.path.abspath(start)} or any parent directory")
        directory = parent


def find_workspace_root(manifest_path):
    """Return the directory of the workspace enclosing ``manifest_path``.

    A package outside any workspace is its own root.
    """
    package_dir = os.path.dirname(os.path.abspath(manifest_path))
    directory = package_dir
    while True:
        candidate = os.path.join(directory, MANIFEST_FILE)
        if os.path.isfile(candidate) and "workspace" in _read_toml(candidate):
            return directory
        parent = os.path.dirname(directory)
        if parent == directory:
            return package_dir
        directory = parent


def _inherited(package, workspace_package, key):
    value = package.get(key)
    if isinstance(value, dict) and value.get("workspace") is True:
        if key not in workspace_package:
            raise ManifestError(f"package.{key} is inherited but [workspace.package] does not set it")
        return workspace_package[key]
    return value


def load_project(start="."):
    """Load the package whose Cargo.toml is nearest to ``start``."""
    manifest_path = find_manifest(start)
    logger.debug(f"Using manifest {manifest_path}")
    manifest = _read_toml(manifest_path)
    package = manifest.get("package")
    if not package:
        raise ManifestError(f"{manifest_path} is a virtual manifest, run from one of the workspace members")

    workspace_root = find_workspace_root(manifest_path)
    workspace_package = {}
    if workspace_root != os.path.dirname(manifest_path):
        workspace_package = _read_toml(os.path.join(workspace_root, MANIFEST_FILE)) \
            .get("workspace", {}).get("package", {})
    else:
        workspace_package = manifest.get("workspace", {}).get("package", {})

    if "name" not in package:
        raise ManifestError(f"{manifest_path} has no package.name")
    version = _inherited(package, workspace_package, "version")
    if version is None:
        version = DEFAULT_VERSION

    rel_dir = os.path.relpath(os.path.dirname(manifest_path), workspace_root)
    metadata = PackageMetadata(
        name=package["name"],
        version=str(version),
        manifest_path=manifest_path,
        rel_dir="" if rel_dir == os.curdir else rel_dir.replace(os.sep, "/"),
        license_file=_inherited(package, workspace_package, "license-file")
        or package.get("license_file"),
        **{key: _inherited(package, workspace_package, key) for key in METADATA_KEYS},
    )
    bitbake_metadata = package.get("metadata", {}).get("bitbake", {})
    return CargoProject(package=metadata, workspace_root=workspace_root, bitbake_metadata=bitbake_metadata)


def _git_reference(query):
    params = dict(parse_qsl(query))
    if "tag" in params:
        return Tag(params["tag"])
    if "rev" in params:
        return Rev(params["rev"])
    if "branch" in params:
        return Branch(params["branch"])
    return DefaultBranch()


def parse_source(source):
    """Classify a Cargo.lock ``source`` string."""
    if not source:
        return PathSource()
    if source.startswith(REGISTRY_PREFIXES):
        return RegistrySource()
    if source.startswith("git+"):
        url = source[len("git+"):].split("#", 1)[0]
        _, _, query = url.partition("?")
        return GitSource(url=url, reference=_git_reference(query))
    return OtherSource(url=source)


def load_lockfile(workspace_root):
    """Read every package recorded in the workspace's Cargo.lock."""
    lock_path = os.path.join(workspace_root, LOCK_FILE)
    if not os.path.isfile(lock_path):
        raise ManifestError(
            f"No {LOCK_FILE} found in {workspace_root}. Run 'cargo generate-lockfile' first."
        )
    lock = _read_toml(lock_path)
    dependencies = []
    for entry in lock.get("package", []):
        try:
            dependencies.append(ResolvedDependency(
                name=entry["name"],
                version=entry["version"],
                source=parse_source(entry.get("source")),
            ))
        except KeyError as e:
            raise ManifestError(f"{lock_path} has a package entry without {e}") from e
    logger.debug(f"Loaded {len(dependencies)} packages from {lock_path}")
    return dependencies
