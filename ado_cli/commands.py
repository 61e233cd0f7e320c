"""
Command implementations for ado-cli.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Business logic lives in client.py (AdoClient). These thin wrappers
handle argparse → keyword args, project resolution, and formatter dispatch.
Output is printed only after the client call returns, so a failed
multi-step action prints nothing to stdout.
"""

import getpass
import json
import platform
import sys

from ado_cli import config, credentials
from ado_cli._utils import parse_id, split_csv
from ado_cli.client import AdoClient
from ado_cli.exceptions import CliError, SetupError
from ado_cli.formatters import (
    format_auth_status,
    format_config_list,
    format_pull_request_created,
    format_pull_request_detail,
    format_pull_request_plain,
    format_pull_requests_plain,
    format_pull_requests_table,
    format_version,
    format_vote,
    format_vote_plain,
    format_work_item_created,
    format_work_item_detail,
    format_work_item_plain,
    format_work_item_updated,
    format_work_items_plain,
    format_work_items_table,
    output,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _config(ns):
    cfg = getattr(ns, "config", None)
    return cfg if cfg is not None else config.load_config()


def _client(ns):
    return AdoClient.from_config(_config(ns))


def _project(ns):
    """--project flag, else the configured default."""
    project = getattr(ns, "project", None) or _config(ns).project
    if not project:
        raise SetupError(
            "project not specified (use --project or 'ado config set project <name>')"
        )
    return project


def _empty(ns, message):
    if ns.format == "json":
        print("[]")
    else:
        print(message, file=sys.stderr)


# ---------------------------------------------------------------------------
# Work items
# ---------------------------------------------------------------------------


def cmd_workitem_list(ns):
    project = _project(ns)
    items = _client(ns).query_work_items(
        project,
        work_item_type=ns.type,
        state=ns.state,
        assigned_to=ns.assigned_to,
        top=ns.top,
    )
    if not items:
        _empty(ns, "No work items found.")
        return
    output(items, format_work_items_table, ns.format, format_work_items_plain)


def cmd_workitem_show(ns):
    wi_id = parse_id(ns.id, "work item")
    project = _project(ns)
    wi = _client(ns).get_work_item(project, wi_id)
    output(wi, format_work_item_detail, ns.format, format_work_item_plain)


def cmd_workitem_create(ns):
    project = _project(ns)
    wi = _client(ns).create_work_item(
        project,
        ns.type,
        ns.title,
        description=ns.description,
        assigned_to=ns.assigned_to,
        area_path=ns.area_path,
        iteration_path=ns.iteration_path,
    )
    output(wi, format_work_item_created, ns.format, format_work_item_plain)


def cmd_workitem_update(ns):
    wi_id = parse_id(ns.id, "work item")
    project = _project(ns)
    wi = _client(ns).update_work_item(
        project,
        wi_id,
        title=ns.title,
        state=ns.state,
        assigned_to=ns.assigned_to,
    )
    output(wi, format_work_item_updated, ns.format, format_work_item_plain)


# ---------------------------------------------------------------------------
# Pull requests
# ---------------------------------------------------------------------------


def cmd_pr_list(ns):
    project = _project(ns)
    prs = _client(ns).list_pull_requests(
        project,
        repository=ns.repo,
        status=ns.status,
        creator=ns.creator,
        reviewer=ns.reviewer,
        top=ns.top,
    )
    if not prs:
        _empty(ns, "No pull requests found.")
        return
    output(prs, format_pull_requests_table, ns.format, format_pull_requests_plain)


def cmd_pr_show(ns):
    pr_id = parse_id(ns.id, "pull request")
    project = _project(ns)
    pr = _client(ns).get_pull_request(project, pr_id)
    output(pr, format_pull_request_detail, ns.format, format_pull_request_plain)


def cmd_pr_create(ns):
    project = _project(ns)
    pr = _client(ns).create_pull_request(
        project,
        ns.repo,
        ns.title,
        ns.source,
        ns.target,
        description=ns.description,
        reviewers=split_csv(ns.reviewers),
        draft=ns.draft,
    )
    output(pr, format_pull_request_created, ns.format, format_pull_request_plain)


def _cmd_vote(ns, vote):
    pr_id = parse_id(ns.id, "pull request")
    project = _project(ns)
    result = _client(ns).vote_pull_request(project, pr_id, vote)
    output(result, format_vote, ns.format, format_vote_plain)


def cmd_pr_approve(ns):
    _cmd_vote(ns, config.VOTE_APPROVE)


def cmd_pr_reject(ns):
    _cmd_vote(ns, config.VOTE_REJECT)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


def cmd_auth_login(ns):
    pat = ns.pat
    if not pat:
        pat = getpass.getpass("Enter PAT: ", stream=sys.stderr)
    credentials.set_pat(pat)
    print("PAT stored successfully.", file=sys.stderr)


def cmd_auth_logout(ns):
    credentials.delete_pat()
    print("PAT removed from keyring.", file=sys.stderr)


def cmd_auth_status(ns):
    output(credentials.token_status(), format_auth_status, ns.format, format_auth_status)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def cmd_config_set(ns):
    try:
        cfg = config.load_config(apply_env=False)
    except CliError as e:
        if not config.RUNTIME_QUIET:
            print(f"[WARN] {e.message}; starting from defaults.", file=sys.stderr)
        cfg = config.Config()
    config.set_value(cfg, ns.key, ns.value)
    config.save_config(cfg)
    print(f"Set {ns.key} = {ns.value}", file=sys.stderr)


def cmd_config_get(ns):
    print(config.get_value(_config(ns), ns.key))


def cmd_config_list(ns):
    cfg = _config(ns)
    if ns.format == "json":
        print(json.dumps(cfg.to_dict(), indent=2, ensure_ascii=False))
        return
    print(format_config_list({**cfg.to_dict(), "path": config.config_path()}))


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------


def cmd_version(ns):
    info = {
        "version": config.VERSION,
        "os": platform.system().lower(),
        "arch": platform.machine().lower(),
        "python_version": platform.python_version(),
    }
    output(info, format_version, ns.format, format_version)
