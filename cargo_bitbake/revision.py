from .errors import RevisionError

# characters of the commit id carried into PV
REV_LENGTH = 10


def git_srcpv(fact):
    """Return the PV suffix directive needed for ``fact``, or "" for a tagged checkout.

    Untagged builds get the abbreviated commit appended to PV so two
    builds of different commits never share an sstate entry.
    """
    rev = fact.rev
    if fact.tag and len(rev) > REV_LENGTH:
        return ""
    if len(rev) < REV_LENGTH:
        raise RevisionError(
            f"Project revision '{rev}' is too short to derive a version suffix "
            f"(need at least {REV_LENGTH} characters). Is the project inside a git checkout?"
        )
    # ${SRCPV} cannot be used here, see meta-rust/meta-rust#136
    return f'PV:append = ".AUTOINC+{rev[:REV_LENGTH]}"'
