"""
ado-cli shared configuration, constants, and module-level state.
Only imports exceptions from the project.
"""

import json
import os
import tempfile
from dataclasses import asdict, dataclass

from ado_cli.exceptions import CliError, ValidationError

# ---------------------------------------------------------------------------
# Config file path and env helpers
# ---------------------------------------------------------------------------

CONFIG_FILE_NAME = "config.json"


def config_dir():
    """Directory holding config.json (ADO_CONFIG_DIR overrides ~/.config/ado)."""
    override = os.environ.get("ADO_CONFIG_DIR")
    if override:
        return override
    return os.path.join(os.path.expanduser("~"), ".config", "ado")


def config_path():
    return os.path.join(config_dir(), CONFIG_FILE_NAME)


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = os.environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.3.0"

DEFAULT_API_VERSION = "7.1"
BASE_HOST = "https://dev.azure.com"

VALID_FORMATS = ("table", "json", "plain")
DEFAULT_FORMAT = "table"
CONFIG_KEYS = ("organization", "project", "output_format")

# Env var -> config key. Env values win over the file.
ENV_OVERRIDES = {
    "ADO_ORGANIZATION": "organization",
    "ADO_PROJECT": "project",
    "ADO_OUTPUT_FORMAT": "output_format",
}

VOTE_APPROVE = 10
VOTE_APPROVE_WITH_SUGGESTIONS = 5
VOTE_NONE = 0
VOTE_WAITING_FOR_AUTHOR = -5
VOTE_REJECT = -10

VOTE_LABELS = {
    VOTE_APPROVE: "Approved",
    VOTE_APPROVE_WITH_SUGGESTIONS: "Approved with suggestions",
    VOTE_NONE: "No vote",
    VOTE_WAITING_FOR_AUTHOR: "Waiting for author",
    VOTE_REJECT: "Rejected",
}

DEFAULT_TOP = 20

# ---------------------------------------------------------------------------
# Module-level state (loaded from env)
# ---------------------------------------------------------------------------

API_VERSION = os.environ.get("ADO_API_VERSION") or DEFAULT_API_VERSION
HTTP_TIMEOUT_SECONDS = _env_int("ADO_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RESPONSE_BYTES = _env_int("ADO_HTTP_MAX_RESPONSE_BYTES", 10_000_000)
HTTP_LOG_ENABLED = _env_bool("ADO_HTTP_LOG", False)
RUNTIME_QUIET = False


# ---------------------------------------------------------------------------
# Persisted user configuration
# ---------------------------------------------------------------------------


@dataclass
class Config:
    """User configuration stored in ~/.config/ado/config.json."""

    organization: str = ""
    project: str = ""
    output_format: str = DEFAULT_FORMAT

    def to_dict(self):
        return asdict(self)


def load_config(path=None, apply_env=True):
    """Read the config file. Missing file means defaults."""
    path = path or config_path()
    data = {}
    if os.path.exists(path):
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CliError(f"Invalid JSON in config file {path}: {e.msg}") from None
        except OSError as e:
            raise CliError(f"Cannot read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise CliError(f"Invalid config file {path}: expected a JSON object.")
    cfg = Config(
        organization=str(data.get("organization") or ""),
        project=str(data.get("project") or ""),
        output_format=str(data.get("output_format") or DEFAULT_FORMAT),
    )
    if apply_env:
        for env_key, attr in ENV_OVERRIDES.items():
            value = os.environ.get(env_key)
            if value:
                setattr(cfg, attr, value)
    return cfg


def save_config(cfg, path=None):
    """Write the config file (atomic write-then-rename)."""
    path = path or config_path()
    target_dir = os.path.dirname(path) or "."
    os.makedirs(target_dir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=target_dir, prefix=".config_tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(cfg.to_dict(), f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        # Clean up temp file on any failure.
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise
    return path


def _check_key(key):
    if key not in CONFIG_KEYS:
        raise ValidationError(f"unknown config key '{key}' (valid: {', '.join(CONFIG_KEYS)})")


def get_value(cfg, key):
    _check_key(key)
    return getattr(cfg, key)


def set_value(cfg, key, value):
    """Validate and assign one config key in place."""
    _check_key(key)
    if key == "output_format" and value not in VALID_FORMATS:
        raise ValidationError(
            f"invalid output_format '{value}' (must be {', '.join(VALID_FORMATS)})"
        )
    setattr(cfg, key, value)
    return cfg
