"""
Name -> identifier resolution by listing candidates and matching names.

Every call lists fresh; nothing is cached.
"""

import sys

from ado_cli import config
from ado_cli.exceptions import NotFoundError


def _attr(candidate, key):
    if isinstance(candidate, dict):
        return candidate.get(key)
    return getattr(candidate, key, None)


def match_by_name(candidates, name, *, kind, scope, key="name", id_key="id"):
    """Return the id of the first candidate whose name equals *name*, ignoring case.

    Several case-insensitive matches are not an error: the first one in
    listing order wins and a warning goes to stderr.
    """
    wanted = (name or "").casefold()
    matches = [c for c in candidates if (_attr(c, key) or "").casefold() == wanted]
    if not matches:
        available = [str(_attr(c, key)) for c in candidates if _attr(c, key)]
        raise NotFoundError(kind, name, scope, available)
    if len(matches) > 1 and not config.RUNTIME_QUIET:
        ids = ", ".join(str(_attr(m, id_key)) for m in matches)
        print(
            f"[WARN] {len(matches)} {kind}s named '{name}' in project '{scope}' ({ids}); "
            "using the first.",
            file=sys.stderr,
        )
    return _attr(matches[0], id_key)


def resolve(kind, scope, name, list_candidates):
    """List candidates in *scope* (one network call) and match *name*."""
    return match_by_name(list_candidates(scope), name, kind=kind, scope=scope)
