"""Formatters for pull requests and votes."""

from ado_cli.formatters._table import _detail, _sanitize_str, _table, _trunc


def format_pull_requests_table(prs):
    """Format a list of PullRequest records as a table."""
    if not prs:
        return "No pull requests found."
    cols = [
        ("ID", 8),
        ("Title", 50),
        ("Source", 20),
        ("Target", 20),
        ("Status", 12),
        ("Creator", 0),
    ]
    rows = []
    for pr in prs:
        rows.append(
            (
                str(pr.id),
                _trunc(pr.title, 50),
                _trunc(pr.source_branch, 20),
                _trunc(pr.target_branch, 20),
                pr.status,
                _trunc(pr.created_by.display_name, 20),
            )
        )
    return _table(cols, rows, f"Total: {len(prs)} pull requests")


def format_pull_requests_plain(prs):
    return "\n".join(f"{pr.id}\t{pr.title}" for pr in prs)


def format_pull_request_plain(pr):
    return f"{pr.id}\t{pr.title}"


def format_pull_request_detail(pr):
    lines = [
        _detail(
            [
                ("ID", str(pr.id)),
                ("Title", pr.title),
                ("Status", pr.status),
                ("Draft", "yes" if pr.is_draft else "no"),
                ("Source", pr.source_branch),
                ("Target", pr.target_branch),
                ("Creator", pr.created_by.display_name),
                ("Merge Status", pr.merge_status),
                ("Repository", pr.repository.name),
            ]
        )
    ]
    if pr.reviewers:
        lines.append("")
        lines.append("Reviewers:")
        for r in pr.reviewers:
            lines.append(f"  - {_sanitize_str(r.display_name)} ({r.vote_label})")
    if pr.description:
        lines.append("")
        lines.append("Description:")
        lines.append(_sanitize_str(pr.description))
    return "\n".join(lines)


def format_pull_request_created(pr):
    return f"Created pull request {pr.id}: {pr.title}"


def format_vote(result):
    return f"{result.status} pull request {result.pull_request_id}"


def format_vote_plain(result):
    return f"{result.pull_request_id}\t{result.status}"
