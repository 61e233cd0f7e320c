"""
ado-cli — a fast, script-friendly CLI for Azure DevOps
"""

import argparse
import json
import sys

from ado_cli import config
from ado_cli.commands import (
    cmd_auth_login,
    cmd_auth_logout,
    cmd_auth_status,
    cmd_config_get,
    cmd_config_list,
    cmd_config_set,
    cmd_pr_approve,
    cmd_pr_create,
    cmd_pr_list,
    cmd_pr_reject,
    cmd_pr_show,
    cmd_version,
    cmd_workitem_create,
    cmd_workitem_list,
    cmd_workitem_show,
    cmd_workitem_update,
)
from ado_cli.exceptions import CliError

HELP_TEXT = """\
Usage: ado <command> <subcommand> [args...]

Global flags:
  --json                  Output in JSON format
  --plain                 Output in plain text (one record per line)
  --format <fmt>          table, json, or plain (default: config, then table)
  --verbose, -v           Log HTTP requests to stderr
  --quiet, -q             Suppress warnings
  --version               Show version number

Commands:
  workitem (wi)
    list                    - List work items (WIQL search)
      -p, --project <name>    Project (default: config project)
      --type <type>           Work item type (Bug, Task, User Story, ...)
      --state <state>         State (New, Active, Closed, ...)
      --assigned-to <user>    Assigned user (@me for yourself)
      --top <n>               Maximum number of results (default: 20)
    show <id>               - Show one work item
    create                  - Create a work item
      --type <type>           Work item type (required)
      --title <text>          Title (required)
      --description <text>    Description
      --assigned-to <user>    Assigned user
      --area-path <path>      Area path
      --iteration-path <path> Iteration path
    update <id>             - Update a work item
      --title <text>          New title
      --state <state>         New state
      --assigned-to <user>    New assigned user
  pr (pullrequest)
    list                    - List pull requests
      --status <s>            active, completed, abandoned, all
      --creator <id>          Creator identity id (@me for yourself)
      --reviewer <id>         Reviewer identity id (@me for yourself)
      --repo <name>           Repository name
      --top <n>               Maximum number of results (default: 20)
    show <id>               - Show one pull request
    create                  - Create a pull request
      --repo <name>           Repository name (required)
      --title <text>          Title (required)
      --source <branch>       Source branch (required)
      --target <branch>       Target branch (required)
      --description <text>    Description
      --reviewers <ids>       Comma-separated reviewer identity ids
      --draft                 Create as draft
    approve <id>            - Approve a pull request (vote 10)
    reject <id>             - Reject a pull request (vote -10)
  auth
    login [--pat <token>]   - Store a Personal Access Token in the OS keyring
    logout                  - Remove the stored PAT
    status                  - Show authentication status
  config
    set <key> <value>       - organization, project, output_format
    get <key>               - Print one value
    list                    - Print all values
  version                   - Show version information
"""


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so flags work after subcommands)
# ---------------------------------------------------------------------------


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_or_None, verbose, quiet, remaining_argv).
    --json beats --plain beats --format. Handles --version directly.
    """
    json_flag = False
    plain_flag = False
    fmt = None
    verbose = False
    quiet = False
    remaining = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--version":
            print(f"ado {config.VERSION}")
            sys.exit(0)
        elif arg == "--json":
            json_flag = True
        elif arg == "--plain":
            plain_flag = True
        elif arg in ("--verbose", "-v"):
            verbose = True
        elif arg in ("--quiet", "-q"):
            quiet = True
        elif arg == "--format" and i + 1 < len(argv):
            fmt = argv[i + 1]
            if fmt not in config.VALID_FORMATS:
                raise CliError(f"Invalid format '{fmt}'. Use: {', '.join(config.VALID_FORMATS)}")
            i += 2
            continue
        else:
            remaining.append(arg)
        i += 1
    if quiet and verbose:
        raise CliError("--quiet and --verbose are mutually exclusive.")
    if json_flag:
        fmt = "json"
    elif plain_flag:
        fmt = "plain"
    return fmt, verbose, quiet, remaining


def resolve_format(flag_fmt, cfg):
    """Flag, then config output_format, then table."""
    if flag_fmt:
        return flag_fmt
    if cfg.output_format in config.VALID_FORMATS:
        return cfg.output_format
    return config.DEFAULT_FORMAT


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(message)


def _positive_int(value):
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a positive integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


def _group(sub, name, aliases, subcommands):
    p = sub.add_parser(name, aliases=aliases)
    p.set_defaults(func=None, group=name, subcommands=subcommands)
    return p.add_subparsers(dest="subcommand", parser_class=_SubcommandParser)


def _add_project(p):
    p.add_argument("--project", "-p")


def build_parser():
    parser = _SubcommandParser(
        prog="ado",
        description="A fast, script-friendly CLI for Azure DevOps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- workitem ---
    wi = _group(sub, "workitem", ["wi"], "list, show, create, update")

    p = wi.add_parser("list")
    _add_project(p)
    p.add_argument("--type")
    p.add_argument("--state")
    p.add_argument("--assigned-to", dest="assigned_to")
    p.add_argument("--top", type=_positive_int, default=config.DEFAULT_TOP)
    p.set_defaults(func=cmd_workitem_list)

    p = wi.add_parser("show")
    p.add_argument("id")
    _add_project(p)
    p.set_defaults(func=cmd_workitem_show)

    p = wi.add_parser("create")
    _add_project(p)
    p.add_argument("--type")
    p.add_argument("--title")
    p.add_argument("--description")
    p.add_argument("--assigned-to", dest="assigned_to")
    p.add_argument("--area-path", dest="area_path")
    p.add_argument("--iteration-path", dest="iteration_path")
    p.set_defaults(func=cmd_workitem_create)

    p = wi.add_parser("update")
    p.add_argument("id")
    _add_project(p)
    p.add_argument("--title")
    p.add_argument("--state")
    p.add_argument("--assigned-to", dest="assigned_to")
    p.set_defaults(func=cmd_workitem_update)

    # --- pr ---
    pr = _group(sub, "pr", ["pullrequest"], "list, show, create, approve, reject")

    p = pr.add_parser("list")
    _add_project(p)
    p.add_argument("--status")
    p.add_argument("--creator")
    p.add_argument("--reviewer")
    p.add_argument("--repo")
    p.add_argument("--top", type=_positive_int, default=config.DEFAULT_TOP)
    p.set_defaults(func=cmd_pr_list)

    p = pr.add_parser("show")
    p.add_argument("id")
    _add_project(p)
    p.set_defaults(func=cmd_pr_show)

    p = pr.add_parser("create")
    _add_project(p)
    p.add_argument("--repo")
    p.add_argument("--title")
    p.add_argument("--source")
    p.add_argument("--target")
    p.add_argument("--description")
    p.add_argument("--reviewers")
    p.add_argument("--draft", action="store_true")
    p.set_defaults(func=cmd_pr_create)

    for name, handler in (("approve", cmd_pr_approve), ("reject", cmd_pr_reject)):
        p = pr.add_parser(name)
        p.add_argument("id")
        _add_project(p)
        p.set_defaults(func=handler)

    # --- auth ---
    auth = _group(sub, "auth", [], "login, logout, status")
    p = auth.add_parser("login")
    p.add_argument("--pat")
    p.set_defaults(func=cmd_auth_login)
    auth.add_parser("logout").set_defaults(func=cmd_auth_logout)
    auth.add_parser("status").set_defaults(func=cmd_auth_status)

    # --- config ---
    cfg = _group(sub, "config", [], "set, get, list")
    p = cfg.add_parser("set")
    p.add_argument("key")
    p.add_argument("value")
    p.set_defaults(func=cmd_config_set)
    p = cfg.add_parser("get")
    p.add_argument("key")
    p.set_defaults(func=cmd_config_get)
    cfg.add_parser("list").set_defaults(func=cmd_config_list)

    # --- version ---
    sub.add_parser("version").set_defaults(func=cmd_version)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        payload = {
            "ok": False,
            "error": {
                "type": getattr(err, "error_type", "error"),
                "message": msg,
                "exit_code": getattr(err, "exit_code", 1),
            },
        }
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    print(msg, file=sys.stderr)


def _load_config_for(command):
    """Config is loaded once per invocation. A broken config file must not
    block `ado config ...`, which is how it gets repaired."""
    try:
        return config.load_config()
    except CliError:
        if command != "config":
            raise
        return config.Config()


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    fmt = config.DEFAULT_FORMAT
    try:
        flag_fmt, verbose, quiet, remaining_argv = _extract_global_flags(argv)
        fmt = flag_fmt or fmt
        config.RUNTIME_QUIET = quiet
        if verbose:
            config.HTTP_LOG_ENABLED = True

        if not remaining_argv:
            print(HELP_TEXT)
            sys.exit(0)

        ns = build_parser().parse_args(remaining_argv)
        if ns.show_help or not ns.command:
            print(HELP_TEXT)
            sys.exit(0)

        cfg = _load_config_for(ns.command)
        fmt = resolve_format(flag_fmt, cfg)
        ns.format = fmt
        ns.config = cfg

        handler = getattr(ns, "func", None)
        if handler is None:
            raise CliError(f"Missing subcommand for '{ns.group}'. Use one of: {ns.subcommands}")
        handler(ns)

    except CliError as e:
        _emit_cli_error(e, fmt)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
