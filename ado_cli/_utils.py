"""
Shared pure-utility functions for ado-cli.

These helpers have no business logic and no side effects.
"""

from ado_cli import config
from ado_cli.exceptions import ValidationError

_HEADS_PREFIX = "refs/heads/"


def short_branch(ref):
    """refs/heads/main -> main. Other refs are left alone."""
    if ref and ref.startswith(_HEADS_PREFIX):
        return ref[len(_HEADS_PREFIX) :]
    return ref or ""


def ensure_ref(branch):
    """main -> refs/heads/main. Anything already under refs/ is kept."""
    if branch.startswith("refs/"):
        return branch
    return _HEADS_PREFIX + branch


def vote_label(vote):
    return config.VOTE_LABELS.get(vote, str(vote))


def display_value(value):
    """Display string for a dynamically typed field value.

    Identity fields arrive as nested objects; show their displayName.
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        name = value.get("displayName")
        if isinstance(name, str):
            return name
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_id(raw, kind="work item"):
    """Parse a positive numeric id from user input."""
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"invalid {kind} ID: {raw}") from None
    if value <= 0:
        raise ValidationError(f"invalid {kind} ID: {raw}")
    return value


def split_csv(raw):
    """Split a comma-separated option, dropping blanks."""
    if not raw:
        return []
    return [v.strip() for v in raw.split(",") if v.strip()]
