"""JSON Patch documents for work item create/update."""

from dataclasses import dataclass
from typing import Any

from ado_cli.exceptions import ValidationError

OP_ADD = "add"
OP_REPLACE = "replace"
VALID_OPS = (OP_ADD, OP_REPLACE)

TITLE = "System.Title"
DESCRIPTION = "System.Description"
ASSIGNED_TO = "System.AssignedTo"
AREA_PATH = "System.AreaPath"
ITERATION_PATH = "System.IterationPath"
STATE = "System.State"


@dataclass(frozen=True)
class PatchOperation:
    op: str
    path: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.op, "path": self.path, "value": self.value}


def field_path(ref: str) -> str:
    return f"/fields/{ref}"


def build_patch(op: str, fields) -> list[PatchOperation]:
    """Build patch operations from ordered (field_ref, value) pairs.

    Pairs with a None or empty-string value are left out, so absent input
    never clears a field. Field refs are not validated; the service decides.
    """
    if op not in VALID_OPS:
        raise ValidationError(f"invalid patch op '{op}' (must be {' or '.join(VALID_OPS)})")
    return [
        PatchOperation(op, field_path(ref), value)
        for ref, value in fields
        if value is not None and value != ""
    ]


def to_document(ops) -> list[dict[str, Any]]:
    """Request body for application/json-patch+json."""
    return [op.to_dict() for op in ops]
