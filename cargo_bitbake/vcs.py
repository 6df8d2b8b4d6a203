"""Inspect the project's own git checkout."""

from .errors import VcsError
from .git import GitPrefix, git_to_yocto_git_url
from .models import ProjectRepoFact
from .utils import run_shell_command


def _git(path, *args):
    stdout, stderr, returncode = run_shell_command(["git", *args], cwd=path)
    if returncode != 0:
        raise VcsError(f"'git {' '.join(args)}' failed in {path}: {stderr.strip() or 'exit code ' + str(returncode)}")
    return stdout.strip()


def project_repo(path=".", prefix=GitPrefix.DEFAULT):
    """Describe the checkout containing ``path`` as a ProjectRepoFact.

    The origin remote becomes the project's SRC_URI; a checked out branch
    is kept so BitBake fetches the right one.

    Raises:
        VcsError: not a git checkout, or no ``origin`` remote.
    """
    url = _git(path, "remote", "get-url", "origin")
    rev = _git(path, "rev-parse", "HEAD")
    branch = _git(path, "rev-parse", "--abbrev-ref", "HEAD")
    _, _, returncode = run_shell_command(["git", "describe", "--tags", "--exact-match", "HEAD"], cwd=path)

    if branch and branch != "HEAD":
        url = f"{url.split('?', 1)[0]}?branch={branch}"
    return ProjectRepoFact(
        uri=git_to_yocto_git_url(url, None, prefix),
        rev=rev,
        tag=returncode == 0,
    )
