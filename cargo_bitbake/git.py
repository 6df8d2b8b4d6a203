"""Rewrite git remote URLs into BitBake git fetcher URIs."""

import enum
import re
from urllib.parse import parse_qsl

# user@host:path, as accepted by git for ssh remotes
SCP_LIKE = re.compile(r"^(?P<user>[^@/]+)@(?P<host>[^:/]+):(?P<path>.+)$")


class GitPrefix(enum.Enum):
    """Scheme used for the generated URI."""

    DEFAULT = "git"
    SUBMODULE = "gitsm"

    @classmethod
    def parse(cls, value):
        for prefix in cls:
            if prefix.value == value or prefix.name.lower() == str(value).lower():
                return prefix
        raise ValueError(f"Unknown git prefix '{value}', expected one of: {', '.join(p.value for p in cls)}")


def git_to_yocto_git_url(url, name=None, prefix=GitPrefix.DEFAULT):
    """Convert a git remote into the form the BitBake git fetcher expects.

    Args:
        url: Remote as found in Cargo.lock or ``git remote get-url``; a
            leading ``git+`` and a trailing ``#commit`` are tolerated.
        name: Dependency name. When given, ``name=`` and ``destsuffix=``
            are appended so several checkouts do not share a directory.
        prefix: GitPrefix deciding between ``git://`` and ``gitsm://``.

    Returns:
        The BitBake URI, e.g.
        ``git://github.com/foo/bar;protocol=https;nobranch=1;name=bar;destsuffix=bar``.
    """
    if url.startswith("git+"):
        url = url[len("git+"):]
    url = url.split("#", 1)[0]
    url, _, query = url.partition("?")

    params = []
    match = SCP_LIKE.match(url)
    if "://" not in url and match:
        location = f"{match.group('user')}@{match.group('host')}/{match.group('path')}"
        params.append(("protocol", "ssh"))
    else:
        scheme, sep, location = url.partition("://")
        if not sep:
            # bare path
            location = url
            params.append(("protocol", "file"))
        elif scheme != "git":
            params.append(("protocol", scheme))

    query_params = parse_qsl(query, keep_blank_values=True)
    params.extend(query_params)
    if not any(key == "branch" for key, _ in query_params):
        # BitBake checks that SRCREV lives on master unless told otherwise
        params.append(("nobranch", "1"))

    if name:
        params.append(("name", name))
        params.append(("destsuffix", name))

    suffix = "".join(f";{key}={value}" for key, value in params)
    return f"{prefix.value}://{location}{suffix}"
