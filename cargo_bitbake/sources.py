"""Turn resolved dependencies into SRC_URI entries and SRCREV pins."""

from dataclasses import dataclass, field
from typing import List

from .errors import ClassificationError
from .git import GitPrefix, git_to_yocto_git_url
from .models import (
    Branch,
    DefaultBranch,
    GitSource,
    OtherSource,
    PathSource,
    RegistrySource,
    Rev,
    Tag,
)

CRATES_IO_URL = "crates.io"
AUTOREV = "${AUTOREV}"


@dataclass
class SourceDirectives:
    src_uris: List[str] = field(default_factory=list)
    extras: List[str] = field(default_factory=list)


def pinned_revision(reference):
    """Return the SRCREV value for a git reference."""
    if isinstance(reference, Tag):
        return reference.name
    if isinstance(reference, Rev):
        return reference.rev
    if isinstance(reference, Branch):
        # the tip of master can only be known at fetch time
        return AUTOREV if reference.name == "master" else reference.name
    if isinstance(reference, DefaultBranch):
        return AUTOREV
    raise ClassificationError(f"Unsupported git reference: {reference!r}")


def git_directives(dep, prefix=GitPrefix.DEFAULT):
    """Return the fetch URI and the SRCREV/EXTRA_OECARGO_PATHS lines of a git dependency."""
    source = dep.source
    if source.reference is None:
        raise ClassificationError(
            f"Git dependency '{dep.name} {dep.version}' from {source.url} has no branch, tag or revision"
        )
    url = git_to_yocto_git_url(source.url, dep.name, prefix)
    extras = [
        f'SRCREV_FORMAT .= "_{dep.name}"',
        f'SRCREV_{dep.name} = "{pinned_revision(source.reference)}"',
        f'EXTRA_OECARGO_PATHS += "${{WORKDIR}}/{dep.name}"',
    ]
    return url, extras


def classify(dependencies, root_name, prefix=GitPrefix.DEFAULT):
    """Build the SRC_URI list for every dependency of ``root_name``.

    Path dependencies live inside the root package's tree and produce
    nothing. The returned URIs are sorted and free of duplicates.
    """
    directives = SourceDirectives()
    uris = set()
    for dep in sorted(dependencies, key=lambda d: (d.name, d.version)):
        if dep.name == root_name:
            continue
        source = dep.source
        if isinstance(source, RegistrySource):
            uris.add(f"crate://{CRATES_IO_URL}/{dep.name}/{dep.version}")
        elif isinstance(source, PathSource):
            continue
        elif isinstance(source, GitSource):
            url, extras = git_directives(dep, prefix)
            uris.add(url)
            directives.extras.extend(extras)
        elif isinstance(source, OtherSource):
            uris.add(source.url)
        else:
            raise ClassificationError(f"Dependency '{dep.name}' has an unknown source: {source!r}")

    directives.src_uris = sorted(uris)
    return directives
