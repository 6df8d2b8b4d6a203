"""Map a Cargo license expression onto license files for LIC_FILES_CHKSUM."""

import hashlib
import os
import posixpath
import re
from dataclasses import dataclass, field
from typing import List

from .models import LicenseFileEntry, Outcome

CLOSED_LICENSE = "CLOSED"
MD5_PLACEHOLDER = "generateme"
DEFAULT_LICENSE_DIRS = ("LICENSES", "licenses")
GENERIC_LICENSE_FILES = ("LICENSE", "LICENSE.txt", "LICENSE.md", "COPYING")

# "/" is the legacy Cargo separator; OR/AND come from SPDX expressions
SEPARATOR = re.compile(r"(/|\s+OR\s+|\s+AND\s+)")


@dataclass
class LicenseInfo:
    license: str
    files: List[LicenseFileEntry] = field(default_factory=list)
    single: bool = True


def parse_expression(expression):
    """Split a license expression into identifiers and the BitBake LICENSE value.

    Returns:
        A tuple ``(identifiers, license_field, dropped)`` where ``dropped``
        counts empty components that were skipped.
    """
    pieces = SEPARATOR.split(expression.replace("(", " ").replace(")", " "))
    identifiers = []
    license_field = ""
    dropped = 0
    joiner = " | "
    for index, piece in enumerate(pieces):
        if index % 2:
            joiner = " & " if piece.strip() == "AND" else " | "
            continue
        identifier = piece.strip()
        if not identifier:
            dropped += 1
            continue
        license_field += (joiner if identifiers else "") + identifier
        identifiers.append(identifier)
    return identifiers, license_field, dropped


def candidate_names(identifier):
    names = [
        identifier,
        f"LICENSE-{identifier}",
        f"LICENSE_{identifier}",
        f"LICENSE.{identifier}",
        f"{identifier}-LICENSE",
        f"{identifier}.txt",
        f"{identifier}.md",
    ]
    # Apache-2.0 -> LICENSE-Apache, matched case-insensitively against LICENSE-APACHE
    family = identifier.split("-", 1)[0]
    if family != identifier:
        names.append(f"LICENSE-{family}")
    return names


def _list_files(directory):
    try:
        return {name.lower(): name for name in os.listdir(directory)
                if os.path.isfile(os.path.join(directory, name))}
    except (FileNotFoundError, NotADirectoryError):
        return {}


def find_license_file(crate_root, identifier, single_license, license_dirs=DEFAULT_LICENSE_DIRS):
    """Locate the file holding the text of ``identifier``.

    Exact names are tried in the crate root and then in each of
    ``license_dirs``, followed by a case-insensitive pass. A generic
    LICENSE/COPYING file is only accepted when the package has a single
    license, since it cannot tell the texts of a dual license apart.

    Returns:
        The path relative to ``crate_root`` in posix form, or None.
    """
    directories = [""] + list(license_dirs)
    candidates = candidate_names(identifier)

    for directory in directories:
        for name in candidates:
            if os.path.isfile(os.path.join(crate_root, directory, name)):
                return posixpath.join(directory, name)

    listings = [(directory, _list_files(os.path.join(crate_root, directory))) for directory in directories]
    fallbacks = [candidates]
    if single_license:
        fallbacks.append(GENERIC_LICENSE_FILES)
    for names in fallbacks:
        for directory, listing in listings:
            for name in names:
                found = listing.get(name.lower())
                if found:
                    return posixpath.join(directory, found)
    return None


def file_md5(path):
    with open(path, "rb") as f:
        return hashlib.md5(f.read()).hexdigest()


def _entry(identifier, crate_root, rel_dir, relative):
    path = os.path.join(crate_root, *relative.split("/"))
    return LicenseFileEntry(
        identifier=identifier,
        relative_path=posixpath.join(rel_dir, relative),
        md5=file_md5(path),
    )


def resolve_license(license, license_file, crate_root, rel_dir="", license_dirs=DEFAULT_LICENSE_DIRS):
    """Resolve the package license into the LICENSE value and its files.

    Args:
        license: The ``package.license`` expression, or None.
        license_file: The ``package.license-file`` path, or None.
        crate_root: Directory holding the package's Cargo.toml.
        rel_dir: Package directory relative to the fetched source tree.
        license_dirs: Sub-directories searched after the crate root.

    Returns:
        Outcome[LicenseInfo]; misses are reported as warnings.
    """
    outcome = Outcome(value=None)
    rel_dir = rel_dir.replace(os.sep, "/") if rel_dir else ""

    identifiers = []
    license_field = ""
    if license:
        identifiers, license_field, dropped = parse_expression(license)
        if dropped:
            outcome.warnings.append(f"Ignored {dropped} empty component(s) in license expression '{license}'")

    if not identifiers:
        if license is not None:
            outcome.notes.append(f"package.license '{license}' names no license, trying package.license_file")
        else:
            outcome.notes.append("No package.license set in your Cargo.toml, trying package.license_file")
        if license_file:
            relative = license_file.replace(os.sep, "/")
            if relative.startswith("./"):
                relative = relative[2:]
            try:
                entry = _entry(posixpath.basename(relative), crate_root, rel_dir, relative)
            except OSError as e:
                outcome.warnings.append(f"Unable to read license file '{license_file}' ({e.strerror}), checksum left as {MD5_PLACEHOLDER}")
                entry = LicenseFileEntry(
                    identifier=posixpath.basename(relative),
                    relative_path=posixpath.join(rel_dir, relative),
                    md5=MD5_PLACEHOLDER,
                )
            outcome.value = LicenseInfo(license=entry.identifier, files=[entry], single=True)
            return outcome

        outcome.notes.append("No package.license_file set in your Cargo.toml")
        outcome.notes.append(f"Assuming {CLOSED_LICENSE} license")
        placeholder = LicenseFileEntry(identifier=CLOSED_LICENSE, relative_path=CLOSED_LICENSE, md5=MD5_PLACEHOLDER)
        outcome.value = LicenseInfo(license=CLOSED_LICENSE, files=[placeholder], single=True)
        return outcome

    single_license = len(identifiers) == 1
    files = []
    for identifier in identifiers:
        relative = find_license_file(crate_root, identifier, single_license, license_dirs)
        if relative is None:
            relative = f"LICENSE-{identifier}"
            outcome.warnings.append(
                f"Unable to find a license file for {identifier}, using {relative} with md5={MD5_PLACEHOLDER}"
            )
            files.append(LicenseFileEntry(
                identifier=identifier,
                relative_path=posixpath.join(rel_dir, relative),
                md5=MD5_PLACEHOLDER,
            ))
        else:
            files.append(_entry(identifier, crate_root, rel_dir, relative))

    outcome.value = LicenseInfo(license=license_field, files=files, single=single_license)
    return outcome
