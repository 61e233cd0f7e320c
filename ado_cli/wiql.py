"""
WIQL (Work Item Query Language) builder.

Literal values are escaped by doubling single quotes. The current-user
sentinel compiles to the @me macro and is never quoted.
"""

from dataclasses import dataclass

CURRENT_USER = "@me"
_CURRENT_USER_ALIASES = frozenset({"@me", "me"})

SELECT_FIELDS = (
    "System.Id",
    "System.Title",
    "System.State",
    "System.WorkItemType",
    "System.AssignedTo",
)
ORDER_BY = "ORDER BY [System.ChangedDate] DESC"


def escape_wiql(value):
    """Escape a literal for safe interpolation inside single quotes."""
    return value.replace("'", "''")


def is_current_user(value):
    return bool(value) and value.strip().lower() in _CURRENT_USER_ALIASES


def _equals(field_ref, value):
    return f"[{field_ref}] = '{escape_wiql(value)}'"


@dataclass(frozen=True)
class WorkItemQuery:
    """Equality filters scoped to one project. Empty filters are skipped."""

    project: str
    work_item_type: str | None = None
    state: str | None = None
    assigned_to: str | None = None

    def conditions(self):
        clauses = [_equals("System.TeamProject", self.project)]
        if self.work_item_type:
            clauses.append(_equals("System.WorkItemType", self.work_item_type))
        if self.state:
            clauses.append(_equals("System.State", self.state))
        if self.assigned_to:
            if is_current_user(self.assigned_to):
                clauses.append(f"[System.AssignedTo] = {CURRENT_USER}")
            else:
                clauses.append(_equals("System.AssignedTo", self.assigned_to))
        return clauses

    def to_wiql(self):
        columns = ", ".join(f"[{f}]" for f in SELECT_FIELDS)
        where = " AND ".join(self.conditions())
        return f"SELECT {columns} FROM WorkItems WHERE {where} {ORDER_BY}"


def build_wiql(project, work_item_type=None, state=None, assigned_to=None):
    return WorkItemQuery(project, work_item_type, state, assigned_to).to_wiql()
