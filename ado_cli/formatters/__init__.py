"""Output formatting package for ado-cli.

Re-exports all public names so consumers can do:
    from ado_cli.formatters import format_work_items_table
"""

from ado_cli.formatters._core import output, pretty_print, to_jsonable
from ado_cli.formatters._pullrequests import (
    format_pull_request_created,
    format_pull_request_detail,
    format_pull_request_plain,
    format_pull_requests_plain,
    format_pull_requests_table,
    format_vote,
    format_vote_plain,
)
from ado_cli.formatters._settings import (
    format_auth_status,
    format_config_list,
    format_version,
)
from ado_cli.formatters._table import _CONTROL_RE, _detail, _sanitize_str, _table, _trunc
from ado_cli.formatters._workitems import (
    format_work_item_created,
    format_work_item_detail,
    format_work_item_plain,
    format_work_item_updated,
    format_work_items_plain,
    format_work_items_table,
)

__all__ = [
    "_CONTROL_RE",
    "_detail",
    "_sanitize_str",
    "_table",
    "_trunc",
    "format_auth_status",
    "format_config_list",
    "format_pull_request_created",
    "format_pull_request_detail",
    "format_pull_request_plain",
    "format_pull_requests_plain",
    "format_pull_requests_table",
    "format_version",
    "format_vote",
    "format_vote_plain",
    "format_work_item_created",
    "format_work_item_detail",
    "format_work_item_plain",
    "format_work_item_updated",
    "format_work_items_plain",
    "format_work_items_table",
    "output",
    "pretty_print",
    "to_jsonable",
]
