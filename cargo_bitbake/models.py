"""Data passed between the classifier, the license resolver and the renderer."""

import os
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


# Git references, exactly one per git source.

@dataclass(frozen=True)
class Tag:
    name: str


@dataclass(frozen=True)
class Rev:
    rev: str


@dataclass(frozen=True)
class Branch:
    name: str


@dataclass(frozen=True)
class DefaultBranch:
    pass


GitReference = Union[Tag, Rev, Branch, DefaultBranch]


# Where a resolved dependency comes from.

@dataclass(frozen=True)
class RegistrySource:
    pass


@dataclass(frozen=True)
class PathSource:
    pass


@dataclass(frozen=True)
class GitSource:
    url: str
    reference: Optional[GitReference] = None


@dataclass(frozen=True)
class OtherSource:
    url: str


SourceKind = Union[RegistrySource, PathSource, GitSource, OtherSource]


@dataclass(frozen=True)
class ResolvedDependency:
    """One package of the resolved graph as recorded in Cargo.lock."""

    name: str
    version: str
    source: SourceKind


@dataclass(frozen=True)
class ProjectRepoFact:
    """Checkout state of the package being packaged.

    Attributes:
        uri: BitBake fetch URI of the project's own repository.
        rev: Commit identifier of HEAD.
        tag: True if HEAD is exactly a release tag.
    """

    uri: str = ""
    rev: str = ""
    tag: bool = False


@dataclass(frozen=True)
class LicenseFileEntry:
    identifier: str
    relative_path: str
    md5: str

    def directive(self):
        return f"file://{self.relative_path};md5={self.md5}"


@dataclass
class PackageMetadata:
    """Root package identity and the metadata fields used by the recipe."""

    name: str
    version: str
    manifest_path: str
    rel_dir: str = ""
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    license: Optional[str] = None
    license_file: Optional[str] = None

    @property
    def crate_root(self):
        return os.path.dirname(self.manifest_path)


@dataclass
class Outcome(Generic[T]):
    """A computed value plus the advisory messages produced on the way.

    ``notes`` report metadata gaps that were filled by a fallback,
    ``warnings`` report lookups that could only be approximated.
    """

    value: T
    notes: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def absorb(self, other):
        """Take over the messages of ``other`` and return its value."""
        self.notes.extend(other.notes)
        self.warnings.extend(other.warnings)
        return other.value
