"""
Personal Access Token storage in the OS keyring.

ADO_PAT in the environment takes precedence over the keyring so CI jobs
can run without a keyring backend.
"""

import os

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ado_cli.exceptions import CliError, SetupError, ValidationError

KEYRING_SERVICE = "adocli"
KEYRING_USER = "pat"
ENV_PAT = "ADO_PAT"


def mask_token(token, keep=4):
    """Show only a short prefix of a token for safe display."""
    if not token:
        return ""
    return token[:keep] + "..." if len(token) > keep else "..."


def _stored_pat():
    try:
        return keyring.get_password(KEYRING_SERVICE, KEYRING_USER)
    except KeyringError as e:
        raise CliError(f"Cannot read PAT from keyring: {e}") from e


def get_pat():
    """Return the PAT or raise SetupError telling the user how to log in."""
    pat = os.environ.get(ENV_PAT) or _stored_pat()
    if not pat:
        raise SetupError("no PAT found in keyring (run 'ado auth login')")
    return pat


def set_pat(pat):
    pat = (pat or "").strip()
    if not pat:
        raise ValidationError("PAT cannot be empty")
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USER, pat)
    except KeyringError as e:
        raise CliError(f"storing PAT in keyring: {e}") from e


def delete_pat():
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USER)
    except PasswordDeleteError as e:
        raise CliError("removing PAT from keyring: no PAT stored") from e
    except KeyringError as e:
        raise CliError(f"removing PAT from keyring: {e}") from e


def token_status():
    """Describe whether a PAT is available, without revealing it."""
    source = "env" if os.environ.get(ENV_PAT) else "keyring"
    try:
        pat = os.environ.get(ENV_PAT) or _stored_pat()
    except CliError:
        pat = None
    status = {"authenticated": bool(pat), "token_stored": bool(pat)}
    if pat:
        status["token_prefix"] = mask_token(pat)
        status["source"] = source
    return status
