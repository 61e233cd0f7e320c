"""Formatters for work items."""

from ado_cli.formatters._table import _detail, _sanitize_str, _table, _trunc


def format_work_items_table(items):
    """Format a list of WorkItem records as a table."""
    if not items:
        return "No work items found."
    cols = [("ID", 8), ("Type", 16), ("Title", 50), ("State", 12), ("Assigned To", 0)]
    rows = []
    for wi in items:
        rows.append(
            (
                str(wi.id),
                _trunc(wi.work_item_type, 16),
                _trunc(wi.title, 50),
                _trunc(wi.state, 12),
                _trunc(wi.assigned_to, 20),
            )
        )
    return _table(cols, rows, f"Total: {len(items)} work items")


def format_work_items_plain(items):
    """One work item per line: id<TAB>title."""
    return "\n".join(f"{wi.id}\t{wi.title}" for wi in items)


def format_work_item_plain(wi):
    return f"{wi.id}\t{wi.title}"


def format_work_item_detail(wi):
    lines = [
        _detail(
            [
                ("ID", str(wi.id)),
                ("Type", wi.work_item_type),
                ("Title", wi.title),
                ("State", wi.state),
                ("Assigned To", wi.assigned_to),
                ("Area Path", wi.area_path),
                ("Iteration", wi.iteration_path),
                ("Revision", str(wi.rev)),
            ]
        )
    ]
    if wi.description:
        lines.append("")
        lines.append("Description:")
        lines.append(_sanitize_str(wi.description))
    return "\n".join(lines)


def format_work_item_created(wi):
    return f"Created work item {wi.id}: {wi.title}"


def format_work_item_updated(wi):
    return f"Updated work item {wi.id}: {wi.title}"
